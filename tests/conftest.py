# pytest configuration for prh_virre tests
import json
import sys
from pathlib import Path

import pytest

# Ensure the package root is in sys.path for proper imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from prh_virre.models import Credentials  # noqa: E402


def _encode_multipart(metadata, attachments, boundary="XYZ"):
    """Build a multipart/form-data body: one JSON metadata part, then attachments.

    ``attachments`` is a list of (name, filename, content_type, data) tuples.
    """
    crlf = "\r\n"
    parts = [
        f"--{boundary}{crlf}".encode("utf-8"),
        f'Content-Disposition: form-data; name="metadata"{crlf}'.encode("utf-8"),
        f"Content-Type: application/json{crlf}{crlf}".encode("utf-8"),
        json.dumps(metadata).encode("utf-8"),
        crlf.encode("utf-8"),
    ]
    for name, filename, content_type, data in attachments:
        parts.append(f"--{boundary}{crlf}".encode("utf-8"))
        parts.append(
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"{crlf}'.encode("utf-8")
        )
        parts.append(f"Content-Type: {content_type}{crlf}{crlf}".encode("utf-8"))
        parts.append(data)
        parts.append(crlf.encode("utf-8"))
    parts.append(f"--{boundary}--{crlf}".encode("utf-8"))
    return b"".join(parts)


@pytest.fixture
def credentials():
    return Credentials(
        client_id="client-id",
        client_secret="client-secret",
        user_name="user",
        password="secret",
    )


@pytest.fixture
def statements_metadata():
    return {
        "businessId": "1234567-8",
        "register": "krek",
        "companyName": "Acme",
        "period": {"startDate": "2020-01-01", "endDate": "2020-12-31"},
        "documents": [],
    }


@pytest.fixture
def encode_multipart():
    return _encode_multipart
