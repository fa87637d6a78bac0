"""Make sure the target index exists before anything is written to it."""

from __future__ import annotations

import asyncio
import logging

from vector_qa.exceptions import IndexCreationError
from vector_qa.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)


async def ensure_index(
    index: VectorIndexBase,
    name: str,
    dimension: int,
    *,
    metric: str = "cosine",
    init_wait: float = 0.0,
) -> bool:
    """Create index *name* unless it already exists.

    After a creation request the coroutine sleeps *init_wait* seconds so
    the remote index can finish initializing.  Two concurrent callers may
    both see the index as missing; the second creation then fails with
    :class:`IndexCreationError`.

    Returns
    -------
    bool
        ``True`` when the index was created by this call.
    """
    logger.info('Checking "%s"...', name)
    existing = await index.list_indexes()
    if name in existing:
        logger.info('"%s" already exists.', name)
        return False

    logger.info('Creating "%s" (dimension=%d, metric=%s)...', name, dimension, metric)
    try:
        await index.create_index(name, dimension, metric)
    except Exception as exc:
        raise IndexCreationError(f"Failed to create index {name!r}: {exc}") from exc

    logger.info("Waiting %.1fs for the index to finish initializing.", init_wait)
    await asyncio.sleep(init_wait)
    return True
