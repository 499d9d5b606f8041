from sqlalchemy import Column, BigInteger, Integer, String, Date, DateTime, UniqueConstraint, Index
from datetime import datetime
from models.base import Base


class FuneralInvoice(Base):
    """
    Funeral service invoices pulled from the ERP.

    Natural key: (invoice_date, customer_id). Rows are insert-only; a
    repeated fetch for the same date never creates duplicates.
    """
    __tablename__ = "funeral_invoices"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    invoice_date = Column(Date, nullable=False)
    customer_id = Column(String(50), nullable=False)  # c_idno2 in the ERP view
    total_amount = Column(Integer, nullable=False)  # tax-inclusive amount divided by 10

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("invoice_date", "customer_id", name="uq_funeral_invoices_date_customer"),
        Index("idx_funeral_invoices_date", "invoice_date"),
    )
