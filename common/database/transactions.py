"""
Optional multi-document transaction scope.

MongoDB only supports multi-document transactions on replica sets and
sharded clusters. Callers wrap related writes in `transaction_scope` and
pass the yielded session to every Motor call; when transactions are
disabled the session is None, which Motor treats as "no session".

Example:
    async with transaction_scope(client, enabled=True) as session:
        await courses.update_one(query, update, session=session)
        await users.update_one(query, update, session=session)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction_scope(
    client: Optional[AsyncIOMotorClient],
    enabled: bool,
) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """
    Yield a session inside a started transaction, or None.

    The transaction commits when the block exits normally and aborts when
    it raises.
    """
    if not enabled or client is None:
        yield None
        return

    async with await client.start_session() as session:
        async with session.start_transaction():
            logger.debug("Transaction started")
            yield session
        logger.debug("Transaction finished")
