"""
Document store for listings.

Listings are addressed by collection path (``artifacts/<app-id>/public/data/job_ads``)
and live in the ``job_ads`` table. Live queries are held in-process: after every
write to a collection, each query subscribed to it is re-run and its callback
receives the full current snapshot. There is no partial merge and no sequence
numbering; the last delivered snapshot wins.
"""
import asyncio
import inspect
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobboard import database
from jobboard.database_types import parse_guid
from jobboard.models.listing import Listing, RECORD_FIELDS

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Marker replaced with the store's clock when a record is written."""
    
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentStoreError(Exception):
    """Raised when a read or write against the store fails"""
    pass


class DocumentNotFoundError(DocumentStoreError):
    """Raised when a document id does not exist in the collection"""
    pass


class InvalidFilterError(ValueError):
    """Raised when a query filters on a field listings do not have"""
    pass


@dataclass(frozen=True)
class DocumentSnapshot:
    """A document as delivered to readers: its id plus every record field."""
    id: str
    data: Dict[str, Any]
    
    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


SnapshotCallback = Callable[[List[DocumentSnapshot]], Any]


@dataclass(eq=False)
class _Subscription:
    collection_path: str
    filters: Dict[str, Any]
    callback: SnapshotCallback
    active: bool = True


class DocumentStore:
    """
    Process-wide handle on the listings collection.
    
    Created once at startup and injected into the API and the page
    controller. When no session factory is given, the module-level
    ``database.AsyncSessionLocal`` is looked up on every use.
    """
    
    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory
        self._subscriptions: List[_Subscription] = []
        self._last_timestamp: Optional[datetime] = None
    
    def _session(self) -> AsyncSession:
        factory = self._session_factory or database.AsyncSessionLocal
        return factory()
    
    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)
    
    def _server_timestamp(self) -> datetime:
        # Strictly increasing, so two writes never tie on created_at
        now = datetime.utcnow()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now
    
    @staticmethod
    def _conditions(collection_path: str, filters: Dict[str, Any]) -> list:
        conditions = [Listing.collection_path == collection_path]
        for field, value in filters.items():
            if field not in RECORD_FIELDS:
                raise InvalidFilterError(f"Cannot filter on unknown field '{field}'")
            conditions.append(getattr(Listing, field) == value)
        return conditions
    
    async def create_document(self, collection_path: str, record: Dict[str, Any]) -> str:
        """
        Write a new document and return its id.
        
        Raises:
            DocumentStoreError: If the record has unknown fields or the write fails
        """
        unknown = set(record) - set(RECORD_FIELDS)
        if unknown:
            raise DocumentStoreError(f"Unknown fields: {', '.join(sorted(unknown))}")
        
        values = {
            key: self._server_timestamp() if value is SERVER_TIMESTAMP else value
            for key, value in record.items()
        }
        document_id = uuid.uuid4()
        
        async with self._session() as db:
            db.add(Listing(id=document_id, collection_path=collection_path, **values))
            try:
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Error creating document in {collection_path}: {str(e)}", exc_info=True)
                raise DocumentStoreError("Failed to create document") from e
        
        logger.info(f"Created document {document_id} in {collection_path}")
        await self.publish(collection_path)
        return str(document_id)
    
    async def delete_document(self, collection_path: str, document_id: str) -> None:
        """
        Permanently remove a document. There is no soft delete.
        
        Raises:
            DocumentNotFoundError: If no such document exists in the collection
            DocumentStoreError: If the delete fails
        """
        doc_uuid = parse_guid(document_id)
        if doc_uuid is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        
        async with self._session() as db:
            try:
                result = await db.execute(
                    select(Listing).where(
                        and_(Listing.id == doc_uuid, Listing.collection_path == collection_path)
                    )
                )
                listing = result.scalar_one_or_none()
                if listing is None:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
                
                await db.delete(listing)
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Error deleting document {document_id}: {str(e)}", exc_info=True)
                raise DocumentStoreError("Failed to delete document") from e
        
        logger.info(f"Deleted document {document_id} from {collection_path}")
        await self.publish(collection_path)
    
    async def snapshot(
        self,
        collection_path: str,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[DocumentSnapshot]:
        """One-shot read of every document matching an equality filter."""
        conditions = self._conditions(collection_path, filters or {})
        
        async with self._session() as db:
            try:
                result = await db.execute(select(Listing).where(and_(*conditions)))
                listings = result.scalars().all()
            except SQLAlchemyError as e:
                logger.error(f"Error querying {collection_path}: {str(e)}", exc_info=True)
                raise DocumentStoreError("Failed to query documents") from e
        
        return [DocumentSnapshot(id=str(listing.id), data=listing.to_record()) for listing in listings]
    
    async def subscribe_query(
        self,
        collection_path: str,
        filters: Dict[str, Any],
        callback: SnapshotCallback
    ) -> Callable[[], None]:
        """
        Open a live query.
        
        The callback receives the current snapshot before this returns, then a
        fresh full snapshot after every write to the collection. Callbacks may
        be plain functions or coroutines.
        
        Returns:
            A function that cancels the subscription. The caller owns it and
            must call it on teardown.
        """
        self._conditions(collection_path, filters)
        subscription = _Subscription(collection_path, dict(filters), callback)
        self._subscriptions.append(subscription)
        
        def cancel() -> None:
            if subscription.active:
                subscription.active = False
                self._subscriptions.remove(subscription)
                logger.debug(f"Cancelled live query on {collection_path}")
        
        try:
            documents = await self.snapshot(collection_path, subscription.filters)
        except DocumentStoreError:
            cancel()
            raise
        
        await self._deliver(subscription, documents)
        logger.debug(f"Opened live query on {collection_path} with {filters}")
        return cancel
    
    async def publish(self, collection_path: Optional[str] = None) -> None:
        """Push a fresh snapshot to every live query (on one collection, or all)."""
        for subscription in list(self._subscriptions):
            if collection_path is not None and subscription.collection_path != collection_path:
                continue
            try:
                documents = await self.snapshot(subscription.collection_path, subscription.filters)
            except DocumentStoreError:
                # Already logged; listeners keep their previous snapshot
                continue
            if subscription.active:
                await self._deliver(subscription, documents)
    
    async def run_refresher(self, interval_seconds: float) -> None:
        """Re-publish every live query periodically, so writes made outside this process are seen."""
        while True:
            await asyncio.sleep(interval_seconds)
            await self.publish()
    
    async def _deliver(self, subscription: _Subscription, documents: List[DocumentSnapshot]) -> None:
        try:
            result = subscription.callback(documents)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            # A broken listener must not fail the write that triggered it
            logger.error(f"Live query listener failed: {str(e)}", exc_info=True)
