"""
Idempotent store writer: insert fetched records, skipping natural-key conflicts
"""

from typing import Any, Iterable, List, Mapping, Union
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from pydantic import BaseModel
import logging

from core.exceptions import ConfigurationError, StoreError

logger = logging.getLogger(__name__)

Record = Union[BaseModel, Mapping[str, Any]]


class IdempotentStoreWriter:
    """
    Write records into one fact table with insert-if-absent semantics.

    Ensures:
    - A row that violates the table's unique natural key is skipped, not an error
    - The whole batch runs in one transaction (all-or-nothing)
    - The returned count covers only rows actually inserted
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], model):
        self.session_maker = session_maker
        self.model = model

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def build_insert(self, dialect_name: str, row: Mapping[str, Any]):
        """
        Build the dialect's "insert, ignore conflicting unique key" statement.

        PostgreSQL and SQLite use ON CONFLICT DO NOTHING, which skips unique-key
        conflicts only; NOT NULL and type errors still abort the batch. MySQL is
        not supported: INSERT IGNORE also downgrades those errors to warnings.
        """
        if dialect_name == "postgresql":
            return postgresql.insert(self.model).values(**row).on_conflict_do_nothing()
        if dialect_name == "sqlite":
            return sqlite.insert(self.model).values(**row).on_conflict_do_nothing()

        raise ConfigurationError(
            f"Insert-if-absent is not supported for dialect '{dialect_name}'",
            context={"dialect": dialect_name, "table_name": self.table_name}
        )

    async def store(self, records: Iterable[Record]) -> int:
        """
        Insert records, ignoring rows whose natural key already exists.

        Args:
            records: Pydantic record models or plain mappings keyed by column name

        Returns:
            Number of rows inserted

        Raises:
            StoreError: If any insert fails; nothing from the batch is kept
        """
        rows: List[Mapping[str, Any]] = [
            record.model_dump() if isinstance(record, BaseModel) else dict(record)
            for record in records
        ]
        if not rows:
            return 0

        inserted = 0
        dialect_name = None

        async with self.session_maker() as session:
            dialect_name = session.get_bind().dialect.name
            try:
                async with session.begin():
                    for row in rows:
                        result = await session.execute(self.build_insert(dialect_name, row))
                        inserted += max(result.rowcount, 0)
            except SQLAlchemyError as e:
                logger.error(f"Store transaction rolled back for {self.table_name}: {e}")
                raise StoreError(
                    "Transaction failed; no records were stored",
                    context={
                        "table_name": self.table_name,
                        "records": len(rows),
                        "dialect": dialect_name
                    },
                    original_exception=e
                )

        logger.info(
            f"Stored {inserted} of {len(rows)} records into {self.table_name} "
            f"({len(rows) - inserted} already present)"
        )
        return inserted
