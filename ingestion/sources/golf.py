"""
Golf reservation summary source (one database per site)
"""

import calendar
from datetime import date
from typing import Dict, List

from sqlalchemy import text
import logging

from core.config import settings
from schemas.params import GolfSummaryParams
from schemas.records import ReservationSummaryRecord
from ingestion.sources.base import DataSource

logger = logging.getLogger(__name__)

RESERVATION_DATA_NAME = "reservation_groups"

RESERVATION_SUMMARY_SQL = text(
    """
    SELECT
        (
            SELECT sum(b.est_cnt)
            FROM glf_stk_mn a, glf_rev_mn b
            WHERE a.rev_no = b.rev_no
            AND a.ple_date = :resv_date
            AND b.stat <> 'X'
        ) amt_d,
        (
            SELECT sum(b.est_cnt)
            FROM glf_stk_mn a, glf_rev_mn b
            WHERE a.rev_no = b.rev_no
            AND a.ple_date BETWEEN :resv_date_mb AND :resv_date_me
            AND b.stat <> 'X'
        ) amt_m,
        (
            SELECT sum(b.est_cnt)
            FROM glf_stk_mn a, glf_rev_mn b
            WHERE a.rev_no = b.rev_no
            AND a.ple_date BETWEEN :resv_date_yb AND :resv_date_ye
            AND b.stat <> 'X'
        ) amt_y
    FROM dual
    """
)


def reservation_periods(resv_date: date) -> Dict[str, date]:
    """Bind parameters for the day, its calendar month and its calendar year."""
    last_day = calendar.monthrange(resv_date.year, resv_date.month)[1]
    return {
        "resv_date": resv_date,
        "resv_date_mb": resv_date.replace(day=1),
        "resv_date_me": resv_date.replace(day=last_day),
        "resv_date_yb": date(resv_date.year, 1, 1),
        "resv_date_ye": date(resv_date.year, 12, 31),
    }


class GolfReservationSource(DataSource):
    """Reservation group counts for one golf site."""

    name = "golf_reservations"

    async def fetch(self, params: GolfSummaryParams) -> List[ReservationSummaryRecord]:
        site_id = params.db_id
        engine = self.open_engine(settings.golf_dsn(site_id), f"ORACLE_DSN_{site_id}")
        try:
            async with engine.connect() as conn:
                result = await conn.execute(RESERVATION_SUMMARY_SQL, reservation_periods(params.job_date))
                row = result.one()
        finally:
            await engine.dispose()

        # sum() over no reservations is NULL
        summary = ReservationSummaryRecord(
            site_id=site_id,
            summary_date=params.job_date,
            data_name=RESERVATION_DATA_NAME,
            amount_day=int(row[0] or 0),
            amount_month=int(row[1] or 0),
            amount_year=int(row[2] or 0),
        )
        logger.info(
            f"Fetched reservation summary for {site_id} {params.job_date}: "
            f"day={summary.amount_day} month={summary.amount_month} year={summary.amount_year}"
        )
        return [summary]
