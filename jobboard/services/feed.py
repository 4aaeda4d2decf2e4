"""
Live feed of approved listings.

Each snapshot from the store fully replaces the local list, which is kept
sorted newest first. Views are a client-side filter over that list and
never re-query.
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from jobboard.schemas.listing import FeedView
from jobboard.services.store import DocumentSnapshot, DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

APPROVED_ONLY = {"approved": True}


def created_instant(document: DocumentSnapshot) -> datetime:
    """Creation time of a document; missing or unresolvable timestamps count as oldest."""
    value = document.get("created_at")
    if isinstance(value, datetime):
        return value
    return datetime.min


def sort_newest_first(documents: Iterable[DocumentSnapshot]) -> List[DocumentSnapshot]:
    return sorted(documents, key=created_instant, reverse=True)


def filter_by_variant(documents: Iterable[DocumentSnapshot], view: FeedView) -> List[DocumentSnapshot]:
    """Documents whose variant matches the view, in their original order."""
    view = FeedView(view)
    if view == FeedView.ALL:
        return list(documents)
    return [document for document in documents if document.get("variant") == view.value]


class ListingFeed:
    """Holds the current approved snapshot for one viewer."""
    
    def __init__(
        self,
        store: DocumentStore,
        collection_path: str,
        on_update: Optional[Callable[["ListingFeed"], None]] = None
    ):
        self._store = store
        self._on_update = on_update
        self._collection_path = collection_path
        self._cancel: Optional[Callable[[], None]] = None
        self.listings: List[DocumentSnapshot] = []
        self.snapshot_count = 0
    
    @property
    def is_open(self) -> bool:
        return self._cancel is not None
    
    async def open(self, session_id: Optional[str]) -> None:
        """Start the live query. Does nothing without a session or if already open."""
        if not session_id or self.is_open:
            return
        self._cancel = await self._store.subscribe_query(
            self._collection_path, APPROVED_ONLY, self.replace
        )
    
    def close(self) -> None:
        """Release the live query."""
        if self._cancel is not None:
            self._cancel()
            self._cancel = None
    
    async def on_session_changed(self, session_id: Optional[str]) -> None:
        """Follow the session; a failed first read leaves the feed closed and empty."""
        if not session_id:
            self.close()
            return
        try:
            await self.open(session_id)
        except DocumentStoreError as e:
            logger.error(f"Error fetching job ads: {str(e)}", exc_info=True)
    
    def replace(self, documents: List[DocumentSnapshot]) -> None:
        self.listings = sort_newest_first(documents)
        self.snapshot_count += 1
        logger.debug(f"Feed snapshot #{self.snapshot_count}: {len(self.listings)} listings")
        if self._on_update is not None:
            self._on_update(self)
    
    def visible(self, view: FeedView = FeedView.ALL) -> List[DocumentSnapshot]:
        return filter_by_variant(self.listings, view)
