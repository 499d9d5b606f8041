from sqlalchemy import Column, BigInteger, Integer, String, Date, DateTime, UniqueConstraint, Index
from datetime import datetime
from models.base import Base


class GolfReservationSummary(Base):
    """
    Daily reservation counts per golf site.

    Each row holds the reserved group count for the day, the month to date
    and the year to date as seen when the summary was first fetched.
    """
    __tablename__ = "golf_reservation_summaries"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    site_id = Column(String(10), nullable=False)
    summary_date = Column(Date, nullable=False)
    data_name = Column(String(100), nullable=False)

    amount_day = Column(Integer, nullable=False, default=0)
    amount_month = Column(Integer, nullable=False, default=0)
    amount_year = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("site_id", "summary_date", "data_name", name="uq_golf_summaries_site_date_name"),
        Index("idx_golf_summaries_date", "summary_date"),
    )
