"""
ERP funeral invoice source
"""

from datetime import datetime
from typing import List

from sqlalchemy import text
import logging

from core.config import settings
from schemas.params import FuneralInvoiceParams
from schemas.records import FuneralInvoiceRecord
from ingestion.sources.base import DataSource

logger = logging.getLogger(__name__)

# Fills GOBO_UIBF062_V2 with the invoices of the given date
PREPARE_INVOICES_SQL = text("BEGIN ARGOERP.GOBO_P_UIBF062_V(:invoice_date); END;")

SELECT_INVOICES_SQL = text(
    """
    SELECT
        invoice_date,
        c_idno2,
        total_amount_dividint10
    FROM GOBO_UIBF062_V2
    """
)


def _as_date(value):
    # Oracle DATE columns come back as datetime
    if isinstance(value, datetime):
        return value.date()
    return value


class FuneralInvoiceSource(DataSource):
    """Funeral invoices prepared by the ERP stored procedure."""

    name = "erp_funeral_invoices"

    async def fetch(self, params: FuneralInvoiceParams) -> List[FuneralInvoiceRecord]:
        engine = self.open_engine(settings.ERP_DSN, "ERP_DSN")
        try:
            async with engine.connect() as conn:
                await conn.execute(PREPARE_INVOICES_SQL, {"invoice_date": params.job_date})
                result = await conn.execute(SELECT_INVOICES_SQL)
                rows = result.all()
        finally:
            await engine.dispose()

        invoices = [
            FuneralInvoiceRecord(
                invoice_date=_as_date(row[0]),
                customer_id=str(row[1]).strip(),
                total_amount=int(row[2]),
            )
            for row in rows
        ]
        logger.info(f"Fetched {len(invoices)} funeral invoices for {params.job_date}")
        return invoices
