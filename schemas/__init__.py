"""
Pydantic schemas.

Modules:
    params: Tagged union of per-job parameter bags and their ledger serialization
    records: Fetched business record value objects
    api: Response models for the ledger inspection API
"""

__all__ = [
    "params",
    "records",
    "api",
]
