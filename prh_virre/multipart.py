"""Decoder for the multipart/form-data financial statements response.

The financialStatements endpoint answers with a multipart body whose first
part is the JSON metadata of the filing and whose remaining parts are the
filed documents. This module splits such a body into parts and maps them
onto a FinancialStatements record.

Decoding is all-or-nothing: any malformed part fails the whole response
with a DecodeError whose ``reason`` tells the failures apart.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from aiohttp import hdrs
from aiohttp.helpers import parse_mimetype
from aiohttp.multipart import content_disposition_filename, parse_content_disposition
from multidict import CIMultiDict

from .exceptions import DecodeError, DecodeErrorReason
from .models import Attachment, FinancialStatements

CRLF = b"\r\n"

log = logging.getLogger(__name__)


@dataclass
class MultipartPart:
    """A single body part as found on the wire.

    ``data`` is None only when the part has no header/body separator at all;
    an empty payload is ``b""``.
    """
    name: Optional[str] = None
    filename: Optional[str] = None
    type: Optional[str] = None
    data: Optional[bytes] = field(default=None, repr=False)


def get_boundary(content_type: str) -> Optional[str]:
    """Return the boundary parameter of a multipart content-type value.

    Example:
        >>> get_boundary('multipart/form-data; boundary="XYZ"')
        'XYZ'
    """
    return parse_mimetype(content_type).parameters.get("boundary") or None


def _parse_headers(head: bytes) -> CIMultiDict:
    headers: CIMultiDict = CIMultiDict()
    for line in head.decode('utf-8', errors='replace').split("\n"):
        name, sep, value = line.rstrip("\r").partition(":")
        if sep:
            headers.add(name.strip(), value.strip())
    return headers


def _parse_part(raw: bytes) -> MultipartPart:
    if raw.startswith(CRLF):
        head, data = b"", raw[len(CRLF):]
    else:
        head, sep, data = raw.partition(CRLF + CRLF)
        if not sep:
            head, sep, data = raw.partition(b"\n\n")
        if not sep:
            head, data = raw, None

    headers = _parse_headers(head)
    _, params = parse_content_disposition(headers.get(hdrs.CONTENT_DISPOSITION))
    return MultipartPart(
        name=params.get("name"),
        filename=content_disposition_filename(params, "filename"),
        type=headers.get(hdrs.CONTENT_TYPE),
        data=data,
    )


def parse_multipart(body: bytes, boundary: str) -> List[MultipartPart]:
    """Split a multipart body into its parts, in body order.

    Each part starts after a ``--boundary`` line and ends right before the
    line break preceding the next delimiter. Parsing stops at the closing
    ``--boundary--``. A trailing part that is never closed is discarded.

    Args:
        body: Raw response body
        boundary: Boundary token without the leading dashes

    Returns:
        List of parsed parts; empty if the boundary never occurs
    """
    delimiter = b"--" + boundary.encode('latin-1')
    parts: List[MultipartPart] = []

    pos = body.find(delimiter)
    if pos == -1:
        return parts

    while True:
        pos += len(delimiter)
        if body.startswith(b"--", pos):
            break
        # Skip transport padding up to the end of the delimiter line
        eol = body.find(b"\n", pos)
        if eol == -1:
            break
        start = eol + 1
        end = body.find(b"\n" + delimiter, start)
        if end == -1:
            log.warning(f"Multipart part at offset {start} has no closing boundary, ignoring it")
            break
        raw = body[start:end]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        parts.append(_parse_part(raw))
        pos = end + 1

    return parts


def decode_statements(headers: Mapping[str, str], raw_body: bytes) -> FinancialStatements:
    """Decode a financialStatements response into metadata and attachments.

    Args:
        headers: Response headers (matched case-insensitively)
        raw_body: Undecoded response body

    Returns:
        FinancialStatements with the JSON metadata and every attachment in
        original order

    Raises:
        DecodeError: If the content-type is missing, the body has no parts,
            the metadata part is missing or not JSON, or an attachment lacks
            filename, type, name or data
    """
    content_type = CIMultiDict(headers).get(hdrs.CONTENT_TYPE)
    if not content_type:
        raise DecodeError(
            DecodeErrorReason.MISSING_CONTENT_TYPE,
            "No content-type header found in financial statements response",
        )

    boundary = get_boundary(content_type)
    parts = parse_multipart(raw_body, boundary) if boundary else []
    log.debug(f"Financial statements response: boundary={boundary!r}, {len(parts)} part(s)")

    if not parts:
        raise DecodeError(
            DecodeErrorReason.NO_PARTS,
            "No parts found in financial statements response",
        )

    metadata_part, attachment_parts = parts[0], parts[1:]
    if metadata_part.data is None:
        raise DecodeError(
            DecodeErrorReason.MISSING_METADATA,
            "No metadata found in financial statements response",
        )

    try:
        metadata = json.loads(metadata_part.data.decode('utf-8'))
    except ValueError as e:
        raise DecodeError(
            DecodeErrorReason.INVALID_METADATA,
            f"Metadata part of financial statements response is not valid JSON: {e}",
        ) from e

    attachments = []
    for index, part in enumerate(attachment_parts, start=1):
        if not part.filename or not part.type or not part.name or part.data is None:
            raise DecodeError(
                DecodeErrorReason.INVALID_ATTACHMENT,
                f"Invalid attachment found in financial statements response (part {index})",
            )
        attachments.append(Attachment(
            filename=part.filename,
            type=part.type,
            name=part.name,
            data=part.data,
        ))

    return FinancialStatements(metadata=metadata, attachments=attachments)
