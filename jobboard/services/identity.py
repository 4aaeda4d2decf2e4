"""
Anonymous identity: the provider that issues sessions and the per-page
bootstrap that acquires one on load.
"""
import enum
import inspect
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobboard import database
from jobboard.database_types import parse_guid
from jobboard.models.session import AnonymousSession

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised when an anonymous session cannot be issued or looked up"""
    pass


class MissingSessionError(Exception):
    """Raised when an action needing a session identity runs without one"""
    pass


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


SessionListener = Callable[[Optional[str]], Any]


class IdentityProvider:
    """Issues and resolves anonymous sessions."""
    
    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory
    
    def _session(self) -> AsyncSession:
        factory = self._session_factory or database.AsyncSessionLocal
        return factory()
    
    async def create_session(self, client_ip: Optional[str] = None) -> str:
        """Create a new anonymous session and return its id."""
        async with self._session() as db:
            session = AnonymousSession(created_ip=client_ip)
            db.add(session)
            try:
                await db.commit()
                await db.refresh(session)
            except SQLAlchemyError as e:
                await db.rollback()
                raise IdentityError("Failed to create anonymous session") from e
            session_id = str(session.id)
        
        logger.info(f"Issued anonymous session {session_id} (ip={client_ip or 'unknown'})")
        return session_id
    
    async def resolve(self, session_id: Optional[str]) -> Optional[AnonymousSession]:
        """Look up a session by id, marking it seen. Returns None if unknown."""
        session_uuid = parse_guid(session_id) if session_id else None
        if session_uuid is None:
            return None
        
        async with self._session() as db:
            try:
                result = await db.execute(
                    select(AnonymousSession).where(AnonymousSession.id == session_uuid)
                )
                session = result.scalar_one_or_none()
                if session is not None:
                    session.last_seen_at = datetime.utcnow()
                    await db.commit()
                    await db.refresh(session)
            except SQLAlchemyError as e:
                await db.rollback()
                raise IdentityError("Failed to look up anonymous session") from e
        
        return session


class AuthBootstrap:
    """
    Acquires an anonymous identity for one page and tells dependents about it.
    
    Starts unauthenticated; a successful ``begin_anonymous_session`` moves it
    to authenticated, where it stays for the page lifetime. ``clear`` is only
    used on teardown.
    """
    
    def __init__(self, provider: IdentityProvider, client_ip: Optional[str] = None):
        self._provider = provider
        self._client_ip = client_ip
        self._listeners: List[SessionListener] = []
        self.session_id: Optional[str] = None
    
    @property
    def state(self) -> AuthState:
        if self.session_id is None:
            return AuthState.UNAUTHENTICATED
        return AuthState.AUTHENTICATED
    
    def on_session_changed(self, callback: SessionListener) -> Callable[[], None]:
        """Register a listener for session changes. Returns its unsubscribe function."""
        self._listeners.append(callback)
        
        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
        
        return unsubscribe
    
    async def begin_anonymous_session(self) -> str:
        """Acquire a session id, or return the one already held."""
        if self.session_id is not None:
            return self.session_id
        
        session_id = await self._provider.create_session(self._client_ip)
        self.session_id = session_id
        await self._emit(session_id)
        return session_id
    
    async def initialize(self) -> Optional[str]:
        """
        Acquire a session on first load.
        
        Failures are logged and leave the identity absent; nothing is retried.
        The page stays interactive; posting and deleting need a session.
        """
        try:
            return await self.begin_anonymous_session()
        except IdentityError as e:
            logger.error(f"Auth error: {str(e)}", exc_info=True)
            return None
    
    async def clear(self) -> None:
        if self.session_id is None:
            return
        self.session_id = None
        await self._emit(None)
    
    async def _emit(self, session_id: Optional[str]) -> None:
        for listener in list(self._listeners):
            result = listener(session_id)
            if inspect.isawaitable(result):
                await result
