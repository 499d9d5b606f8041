"""
Abstract base class for remote data sources
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
import logging

from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], AsyncEngine]


def default_engine_factory(dsn: str) -> AsyncEngine:
    return create_async_engine(dsn, echo=False, pool_pre_ping=True)


class DataSource(ABC):
    """
    A remote line-of-business database exposed as one fallible fetch.

    Responsibilities:
    - Resolve the DSN for the requested parameters
    - Open a short-lived engine, run the queries, dispose the engine
    - Map result rows onto record models

    Any exception raised by ``fetch`` is treated as retriable by the
    orchestrator.
    """

    name: str = "data_source"

    def __init__(self, engine_factory: Optional[EngineFactory] = None):
        self.engine_factory = engine_factory or default_engine_factory

    @abstractmethod
    async def fetch(self, params) -> List[BaseModel]:
        """
        Fetch records for the given parameter bag.

        Args:
            params: The job's typed parameter model

        Returns:
            List of record models
        """
        pass

    def open_engine(self, dsn: Optional[str], setting: str) -> AsyncEngine:
        if not dsn:
            raise ConfigurationError(
                f"{setting} environment variable is not set",
                context={"setting": setting, "source": self.name}
            )
        return self.engine_factory(dsn)
