"""Player sessions: signed tokens and the registry of live sessions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import uuid4

from itsdangerous import BadSignature, URLSafeTimedSerializer

from config import config
from logging_utils import get_logger

logger = get_logger(__name__)


class SessionSigner:
    """Issues and verifies the tokens clients send in ``X-Session-ID``."""

    def __init__(self, secret_key: str | None = None, max_age: int | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt="crack-session",
        )
        self.max_age = max_age or config.session_ttl

    def issue(self) -> str:
        """Sign a fresh random session id."""
        return self.sign(uuid4().hex)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Recover the session id from a token.

        Args:
            token: Token as sent by the client
            max_age: Oldest acceptable token in seconds (defaults to the session TTL)

        Returns:
            The session id, or None for forged, garbled or expired tokens
        """
        try:
            return self._serializer.loads(token, max_age=max_age or self.max_age)
        except BadSignature:
            # SignatureExpired is a BadSignature too
            return None


@dataclass
class SessionRecord:
    """Bookkeeping for one player's session."""

    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)
    games_started: int = 0

    def touch(self, games_started: int | None = None) -> None:
        self.last_activity = datetime.now()
        if games_started is not None:
            self.games_started = games_started

    def expires_at(self, ttl: int) -> datetime:
        return self.last_activity + timedelta(seconds=ttl)


class SessionStore(ABC):
    """Where session records live between requests."""

    def __init__(self, ttl: int | None = None) -> None:
        self.ttl = ttl or config.session_ttl

    @abstractmethod
    async def load(self, token: str) -> SessionRecord | None:
        """Return the live record for ``token``, or None."""
        ...

    @abstractmethod
    async def save(self, token: str, record: SessionRecord) -> None:
        ...

    @abstractmethod
    async def delete(self, token: str) -> None:
        ...

    @abstractmethod
    async def expire(self) -> list[str]:
        """Drop every session idle for longer than the TTL and return their tokens."""
        ...

    async def exists(self, token: str) -> bool:
        return await self.load(token) is not None


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions, like games, end with the process."""

    def __init__(self, ttl: int | None = None) -> None:
        super().__init__(ttl)
        self._records: dict[str, SessionRecord] = {}

    def _is_stale(self, record: SessionRecord, now: datetime) -> bool:
        return record.expires_at(self.ttl) < now

    async def load(self, token: str) -> SessionRecord | None:
        record = self._records.get(token)
        if record is not None and self._is_stale(record, datetime.now()):
            del self._records[token]
            return None
        return record

    async def save(self, token: str, record: SessionRecord) -> None:
        self._records[token] = record

    async def delete(self, token: str) -> None:
        self._records.pop(token, None)

    async def expire(self) -> list[str]:
        now = datetime.now()
        stale = [token for token, record in self._records.items() if self._is_stale(record, now)]
        for token in stale:
            del self._records[token]
        if stale:
            logger.debug("Expired %d idle sessions", len(stale))
        return stale

    def __len__(self) -> int:
        return len(self._records)


_signer: SessionSigner | None = None
_store: SessionStore | None = None


def get_session_signer() -> SessionSigner:
    global _signer
    if _signer is None:
        _signer = SessionSigner()
    return _signer


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        _store = InMemorySessionStore()
    return _store


def read_token(token: str) -> str | None:
    """Session id inside a client token, or None if the token is not ours."""
    return get_session_signer().unsign(token)


async def open_session() -> str:
    """Start a session and return the token the client should send back."""
    token = get_session_signer().issue()
    await get_session_store().save(token, SessionRecord())
    return token


async def touch_session(token: str, games_started: int | None = None) -> SessionRecord:
    """Mark a session as active, recreating its record if it had lapsed."""
    store = get_session_store()
    record = await store.load(token) or SessionRecord()
    record.touch(games_started)
    await store.save(token, record)
    return record


async def close_session(token: str) -> None:
    await get_session_store().delete(token)
