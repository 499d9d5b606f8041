"""
Typed job parameter bags.

Each job type has its own parameter model, discriminated on ``kind``. The
ledger stores the canonical JSON form in ``cron_jobs.job_params`` and its
SHA-256 in ``job_params_hash``.
"""

import hashlib
import json
from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class FuneralInvoiceParams(BaseModel):
    """Fetch the ERP funeral invoices issued on ``job_date``."""
    kind: Literal["funeral_invoice"] = "funeral_invoice"
    job_date: date

    class Config:
        frozen = True


class GolfSummaryParams(BaseModel):
    """Fetch the reservation summary of golf site ``db_id`` for ``job_date``."""
    kind: Literal["golf_summary"] = "golf_summary"
    db_id: str = Field(..., min_length=1, max_length=10)
    job_date: date

    class Config:
        frozen = True

    @field_validator("db_id")
    @classmethod
    def normalize_db_id(cls, v: str) -> str:
        return v.strip().upper()


JobParams = Annotated[
    Union[FuneralInvoiceParams, GolfSummaryParams],
    Field(discriminator="kind"),
]

_params_adapter = TypeAdapter(JobParams)


def serialize_params(params: BaseModel) -> str:
    """Canonical JSON for the ledger: sorted keys, no whitespace."""
    return json.dumps(params.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))


def parse_params(raw: str) -> Union[FuneralInvoiceParams, GolfSummaryParams]:
    """Rebuild the typed parameter bag from its stored JSON."""
    return _params_adapter.validate_json(raw)


def params_hash(serialized: str) -> str:
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
