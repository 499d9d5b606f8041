"""
Fetched business records.

Flat, immutable value objects returned by the data sources and written by
the store writer. Field names match the destination table columns.
"""

from datetime import date

from pydantic import BaseModel, Field


class FuneralInvoiceRecord(BaseModel):
    """One ERP invoice row, keyed by (invoice_date, customer_id)."""
    invoice_date: date
    customer_id: str = Field(..., min_length=1, max_length=50)
    total_amount: int

    class Config:
        frozen = True


class ReservationSummaryRecord(BaseModel):
    """Reservation group counts for one golf site, keyed by (site_id, summary_date, data_name)."""
    site_id: str
    summary_date: date
    data_name: str
    amount_day: int = 0
    amount_month: int = 0
    amount_year: int = 0

    class Config:
        frozen = True
