"""Session store: owns every ConversationSession and serializes access per key."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
from uuid import uuid4

from redis.exceptions import WatchError

from pharmacy_scheduler.config import settings
from pharmacy_scheduler.infra.redis import get_redis, APP_PREFIX
from .models import ConversationSession


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


logger = logging.getLogger(__name__)

SESSION_PREFIX = f"{APP_PREFIX}session:"


class SessionConflictError(Exception):
    """Raised when a save is based on a stale session version."""

    def __init__(self, session_id: str, expected: int, actual: int):
        super().__init__(
            f"Session {session_id} changed concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.session_id = session_id
        self.expected = expected
        self.actual = actual


class SessionManager:
    """
    Session store for conversation state.

    Key pattern (Redis): pharmacy:v1:session:{session_id}

    Every session key gets its own asyncio.Lock; `session()` holds it from
    load to save so turns for the same key never interleave. Saves are
    compare-and-swap on `version`.

    Falls back to in-memory storage when Redis is disabled or unreachable.
    """

    def __init__(self, use_redis: Optional[bool] = None, ttl: Optional[int] = None):
        """Initialize session manager.

        Args:
            use_redis: Store sessions in Redis (defaults to settings)
            ttl: Redis TTL in seconds, 0 for no expiry (defaults to settings)
        """
        self._use_redis = settings.uses_redis if use_redis is None else use_redis
        self._ttl = settings.redis_session_ttl if ttl is None else ttl
        self._in_memory: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _key(self, session_id: str) -> str:
        """Generate Redis key."""
        return f"{SESSION_PREFIX}{session_id}"

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def _redis(self):
        if not self._use_redis:
            return None
        client = await get_redis()
        if client is None:
            logger.warning("Redis unavailable, using in-memory session storage")
        return client

    async def _read(self, session_id: str) -> Optional[str]:
        redis = await self._redis()
        if redis:
            return await redis.get(self._key(session_id))
        return self._in_memory.get(session_id)

    async def _write(self, session: ConversationSession) -> None:
        payload = session.to_json()
        redis = await self._redis()
        if redis:
            key = self._key(session.session_id)
            if self._ttl > 0:
                await redis.setex(key, self._ttl, payload)
            else:
                await redis.set(key, payload)
        else:
            self._in_memory[session.session_id] = payload

    @staticmethod
    def _check_version(session: ConversationSession, data: Optional[str]) -> None:
        if data is None:
            return
        stored_version = ConversationSession.from_json(data).version
        if stored_version != session.version:
            raise SessionConflictError(session.session_id, session.version, stored_version)

    async def _save_redis(self, redis, session: ConversationSession) -> None:
        """WATCH / MULTI / EXEC so the check and the write are atomic across processes."""
        key = self._key(session.session_id)
        expected = session.version
        async with redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            self._check_version(session, await pipe.get(key))

            session.version += 1
            session.updated_at = _utcnow()
            payload = session.to_json()

            pipe.multi()
            if self._ttl > 0:
                pipe.setex(key, self._ttl, payload)
            else:
                pipe.set(key, payload)
            try:
                await pipe.execute()
            except WatchError:
                session.version = expected
                stored = await redis.get(key)
                actual = ConversationSession.from_json(stored).version if stored else 0
                raise SessionConflictError(session.session_id, expected, actual)

    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get a snapshot of a session.

        Args:
            session_id: Session identifier

        Returns:
            ConversationSession or None if not found
        """
        data = await self._read(session_id)
        if data:
            return ConversationSession.from_json(data)
        return None

    async def get_or_create(self, session_id: Optional[str] = None) -> ConversationSession:
        """
        Get existing session or create a new one.

        A new session is created lazily under the caller-supplied key, or
        under a generated key when none is given.

        Args:
            session_id: Session ID (optional)

        Returns:
            Existing or new ConversationSession
        """
        session_id = session_id or str(uuid4())

        session = await self.get(session_id)
        if session:
            return session

        session = ConversationSession(session_id=session_id)
        await self._write(session)
        logger.debug(f"Session created: {session_id}")
        return session

    async def save(self, session: ConversationSession) -> ConversationSession:
        """
        Compare-and-swap save.

        Args:
            session: Session previously obtained from this store

        Returns:
            The saved session (version bumped)

        Raises:
            SessionConflictError: If the stored version moved on
        """
        redis = await self._redis()
        if redis:
            await self._save_redis(redis, session)
        else:
            self._check_version(session, self._in_memory.get(session.session_id))
            session.version += 1
            session.updated_at = _utcnow()
            self._in_memory[session.session_id] = session.to_json()
        logger.debug(f"Session saved: {session.session_id} (v{session.version})")
        return session

    @asynccontextmanager
    async def session(self, session_id: Optional[str] = None) -> AsyncIterator[ConversationSession]:
        """
        Exclusive access to a session for one turn.

        Usage:
            async with manager.session(session_id) as session:
                session.add_turn(...)

        The session is saved on normal exit; nothing is written if the
        block raises.
        """
        session_id = session_id or str(uuid4())
        async with self._lock_for(session_id):
            session = await self.get_or_create(session_id)
            yield session
            await self.save(session)


# Singleton
_manager: Optional[SessionManager] = None


async def get_session_manager() -> SessionManager:
    """Get singleton SessionManager."""
    global _manager
    if _manager is None:
        _manager = SessionManager()
    return _manager
