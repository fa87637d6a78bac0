"""Abstract base class for vector-index backends.

Adding a new backend (Weaviate, Qdrant …) only requires subclassing
:class:`VectorIndexBase` and implementing the four abstract coroutines.
The provisioner and both pipelines are backend-agnostic.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from vector_qa.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)


class VectorIndexBase(ABC):
    """Backend-agnostic vector-index interface.

    All operations address an index by name so one client can serve
    several indexes.
    """

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    async def list_indexes(self) -> list[str]:
        """Return the names of the indexes that currently exist."""
        ...

    @abstractmethod
    async def create_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        """Create index *name* holding vectors of *dimension* compared by *metric*."""
        ...

    @abstractmethod
    async def upsert(self, name: str, records: Sequence[VectorRecord]) -> None:
        """Insert or overwrite *records* (keyed by id) in index *name*."""
        ...

    @abstractmethod
    async def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 10,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[QueryMatch]:
        """Return up to *top_k* matches for *vector*, best first.

        Parameters
        ----------
        name:
            Index to search.
        vector:
            Query embedding; must have the index's dimension.
        top_k:
            Maximum number of matches.
        include_metadata / include_values:
            Whether matches carry stored metadata / vector values.
        """
        ...

    # -- optional overrides ---------------------------------------------------

    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable."""
        try:
            await self.list_indexes()
        except Exception:
            logger.warning("%s health-check failed", type(self).__name__, exc_info=True)
            return False
        return True
