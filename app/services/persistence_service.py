import asyncio
import json
import logging
from typing import Optional, Set

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import PersistenceError
from app.database.state import ChatState
from app.models.base import Base
from app.models.snapshot import SNAPSHOT_ROW_ID, StateSnapshot

logger = logging.getLogger(__name__)


class PersistenceManager:
    """
    Keeps the in-memory ChatState durable by writing the whole state as one
    JSON document into the snapshot table.

    Writes are best effort: a failed flush is logged and retried by the next
    periodic flush, and never fails the operation that triggered it.
    """

    def __init__(self, session_factory, state: Optional[ChatState] = None, interval: float = 5.0):
        self.session_factory = session_factory
        self.state = state
        self.interval = interval
        self.saved_version: Optional[int] = None
        self._lock = asyncio.Lock()
        self._periodic_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._schema_ready = False

    async def load(self) -> ChatState:
        """
        Restore the state from the snapshot table.
        Falls back to an empty state when the snapshot is absent, unreadable or corrupt.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(StateSnapshot).filter(StateSnapshot.id == SNAPSHOT_ROW_ID)
                )
                row = result.scalar_one_or_none()
            self._schema_ready = True
        except SQLAlchemyError as e:
            logger.warning(f"Could not read snapshot, starting empty: {e}")
            return self._attach(ChatState())

        if row is None:
            logger.info("No snapshot found, starting with empty state")
            return self._attach(ChatState())

        try:
            state = ChatState.from_document(json.loads(row.payload))
        except (ValueError, TypeError, AttributeError, SchemaValidationError) as e:
            logger.warning(f"Snapshot is corrupt, starting empty: {e}")
            return self._attach(ChatState())

        logger.info(f"Loaded snapshot with {len(state.users)} users and {len(state.chats)} chats")
        self._attach(state)
        self.saved_version = state.version
        return state

    def _attach(self, state: ChatState) -> ChatState:
        self.state = state
        self.saved_version = None
        return state

    @property
    def dirty(self) -> bool:
        return self.state is not None and self.state.version != self.saved_version

    async def save(self) -> None:
        """
        Overwrite the snapshot with the current full state.

        Raises:
            PersistenceError: If the write fails
        """
        if self.state is None:
            return
        async with self._lock:
            # Re-check under the lock; an earlier queued save may already cover this version
            if self.state.version == self.saved_version:
                return
            version = self.state.version
            payload = json.dumps(self.state.to_document(), ensure_ascii=False)
            try:
                async with self.session_factory() as session:
                    if not self._schema_ready:
                        await session.run_sync(lambda s: Base.metadata.create_all(bind=s.connection()))
                    row = await session.get(StateSnapshot, SNAPSHOT_ROW_ID)
                    if row is None:
                        session.add(StateSnapshot(id=SNAPSHOT_ROW_ID, payload=payload))
                    else:
                        row.payload = payload
                    await session.commit()
            except SQLAlchemyError as e:
                raise PersistenceError(detail=f"Failed to write snapshot: {e}") from e
            self._schema_ready = True
            self.saved_version = version
            logger.debug(f"Snapshot saved at version {version} ({len(payload)} bytes)")

    async def flush(self) -> bool:
        """
        Save if anything changed since the last successful save.
        Returns True when the snapshot is up to date afterwards.
        """
        if not self.dirty:
            return True
        try:
            await self.save()
        except PersistenceError as e:
            logger.warning(f"Snapshot flush failed, will retry: {e.detail}")
            return False
        return True

    def schedule_flush(self) -> None:
        """
        Change listener for ChatState: start a flush in the background.
        Does nothing when no event loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.flush())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.flush()

    def start(self) -> None:
        if self._periodic_task is None:
            self._periodic_task = asyncio.get_running_loop().create_task(self._run_periodic())

    async def stop(self) -> None:
        """Cancel the periodic flush, wait for in-flight flushes and write a final snapshot."""
        if self._periodic_task is not None:
            self._periodic_task.cancel()
            try:
                await self._periodic_task
            except asyncio.CancelledError:
                pass
            self._periodic_task = None
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self.flush()
