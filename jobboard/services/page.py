"""
Headless job board page.

Composes the auth bootstrap, the approved-listings feed, the editor and the
contact prompt around one injected store and identity provider. Two live
subscriptions exist while mounted: the session listener and the feed query.
"""
import logging
from typing import Any, Callable, List, Optional, Union

from jobboard.config import Settings
from jobboard.schemas.contact import ContactKind
from jobboard.schemas.listing import EmployerForm, FeedView, JobSeekerForm, ListingCard, Notice
from jobboard.services.cards import build_listing_card
from jobboard.services.contact import ContactConfirmation, ContactPrompt
from jobboard.services.editor import DELETE_CONFIRMATION, DeleteOutcome, ListingEditor, SubmitOutcome
from jobboard.services.feed import ListingFeed
from jobboard.services.identity import AuthBootstrap, IdentityProvider
from jobboard.services.store import DocumentStore

logger = logging.getLogger(__name__)


class JobBoardPage:
    """One viewer's page: session, feed, editor, alerts and contact prompt."""
    
    def __init__(
        self,
        identity: IdentityProvider,
        store: DocumentStore,
        settings: Settings,
        contact_handler: Optional[Callable[[str], Any]] = None,
        client_ip: Optional[str] = None,
    ):
        self.auth = AuthBootstrap(identity, client_ip=client_ip)
        self.feed = ListingFeed(store, settings.collection_path())
        self.editor = ListingEditor(store, settings.collection_path())
        self.contact = ContactPrompt(contact_handler or (lambda uri: None), settings.phone_country_code)
        self.view = FeedView.ALL
        self.alert: Optional[Notice] = None
        self.editor_open = False
        self.pending_delete: Optional[str] = None
        self._unsubscribe_auth: Optional[Callable[[], None]] = None
    
    @property
    def session_id(self) -> Optional[str]:
        return self.auth.session_id
    
    async def mount(self) -> None:
        """Start following the session, then acquire one."""
        if self._unsubscribe_auth is None:
            self._unsubscribe_auth = self.auth.on_session_changed(self.feed.on_session_changed)
        await self.auth.initialize()
    
    async def unmount(self) -> None:
        """Release the feed query and the session listener."""
        self.feed.close()
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
    
    def set_view(self, view: FeedView) -> None:
        self.view = FeedView(view)
    
    def visible_cards(self) -> List[ListingCard]:
        return [build_listing_card(document) for document in self.feed.visible(self.view)]
    
    def open_editor(self) -> None:
        self.editor_open = True
    
    def dismiss_alert(self) -> None:
        self.alert = None
    
    async def submit(self, form: Union[JobSeekerForm, EmployerForm]) -> Optional[SubmitOutcome]:
        """Post a listing. Without a session this does nothing."""
        if not self.session_id:
            logger.warning("Submit ignored: no session identity")
            return None
        outcome = await self.editor.submit(form, self.session_id)
        self.alert = outcome.notice
        if outcome.close_editor:
            self.editor_open = False
        return outcome
    
    async def delete(self, listing_id: str) -> Optional[DeleteOutcome]:
        """Delete a listing. Without a session this does nothing."""
        if not self.session_id:
            logger.warning("Delete ignored: no session identity")
            return None
        outcome = await self.editor.delete(listing_id, self.session_id)
        self.alert = outcome.notice
        return outcome
    
    def request_delete(self, listing_id: str) -> Notice:
        """Ask for confirmation before an irreversible delete."""
        self.pending_delete = listing_id
        return DELETE_CONFIRMATION
    
    async def confirm_delete(self) -> Optional[DeleteOutcome]:
        listing_id, self.pending_delete = self.pending_delete, None
        if listing_id is None:
            return None
        return await self.delete(listing_id)
    
    def request_contact(self, kind: ContactKind, value: str) -> ContactConfirmation:
        return self.contact.request(kind, value)
