"""Shared typing helpers used across the prh_virre package.

This module centralizes JSON-like typings and the typed dictionaries that
describe the payloads of the PRH auth server and the Virre registry.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Union, TypedDict


# Recursive JSON-ish type used for payloads / returned JSON values
JSONType = Union[Dict[str, "JSONType"], List["JSONType"], str, int, float, bool, None]

# 'krek' for companies, 'srek' for foundations
Register = Literal["krek", "srek"]


class AuthResponse(TypedDict):
    access_token: str
    expires_in: int
    scope: str
    id_token: str
    token_type: str


class Period(TypedDict):
    startDate: str
    endDate: str


class FinancialPeriods(TypedDict):
    """Body of the financialPeriods endpoint, returned to callers as-is."""
    businessId: str
    register: Register
    companyName: str
    financialPeriods: List[Period]


class _DocumentDescriptorBase(TypedDict):
    id: str
    recordNumber: str


class DocumentDescriptor(_DocumentDescriptorBase, total=False):
    """Document entry of the statements metadata.

    The date and format fields are missing for some older filings.
    """
    fileFormat: str
    arrivalDate: str
    acceptanceDate: str


class StatementsMetadata(TypedDict):
    """JSON metadata part of a financialStatements response.

    Field names are kept exactly as the registry sends them.
    """
    businessId: str
    register: Register
    companyName: str
    period: Period
    documents: List[DocumentDescriptor]
