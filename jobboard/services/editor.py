"""
Listing editor: turns a validated form into a new, unapproved listing and
deletes listings by id.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from jobboard.schemas.listing import (
    EmployerForm,
    JobSeekerForm,
    Notice,
    PHONE_OPT_OUT,
)
from jobboard.services.identity import MissingSessionError
from jobboard.services.store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
)

logger = logging.getLogger(__name__)

SUBMIT_SUCCEEDED = Notice(title="Uğurlu!", message="Elanınız 1-2 saat ərzində yoxlanılıb paylaşılacaqdır.")
SUBMIT_FAILED = Notice(title="Xəta", message="Elanınızı paylaşmaq mümkün olmadı.")
DELETE_SUCCEEDED = Notice(title="Uğurlu!", message="Elanınız uğurla silindi.")
DELETE_FAILED = Notice(title="Xəta", message="Elanınızı silmək mümkün olmadı.")

# Shown before a delete is sent
DELETE_CONFIRMATION = Notice(
    title="Silmə Təsdiqi",
    message="Bu elanı silmək istədiyinizə əminsiniz? Bu əməliyyat geri qaytarılmazdır.",
)


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of posting a listing. The form is kept for resubmission on failure."""
    notice: Notice
    listing_id: Optional[str] = None
    
    @property
    def ok(self) -> bool:
        return self.listing_id is not None
    
    @property
    def clear_form(self) -> bool:
        return self.ok
    
    @property
    def close_editor(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class DeleteOutcome:
    notice: Notice
    deleted: bool
    not_found: bool = False


def normalize_phone(value: str) -> str:
    """Keep only digits; the decline sentinel is stored as is."""
    if value == PHONE_OPT_OUT:
        return value
    return re.sub(r"[^0-9]", "", value)


def build_listing_record(
    form: Union[JobSeekerForm, EmployerForm],
    session_id: str
) -> Dict[str, Any]:
    """
    Build the document for a new listing.
    
    Sets the variant tag, owner and a server-assigned creation time, and
    always starts unapproved. Every form value is copied with surrounding
    whitespace trimmed and the phone reduced to digits.
    """
    record: Dict[str, Any] = {
        "variant": form.type,
        "user_id": str(session_id),
        "created_at": SERVER_TIMESTAMP,
        "approved": False,
    }
    
    for key, value in form.model_dump(mode="json", exclude={"type", "opt_outs"}).items():
        if isinstance(value, str):
            value = value.strip()
        record[key] = value
    
    if record.get("contact_number"):
        record["contact_number"] = normalize_phone(record["contact_number"])
    
    return record


class ListingEditor:
    """Creates and deletes listings in one collection."""
    
    def __init__(self, store: DocumentStore, collection_path: str):
        self._store = store
        self._collection_path = collection_path
    
    async def submit(
        self,
        form: Union[JobSeekerForm, EmployerForm],
        session_id: Optional[str]
    ) -> SubmitOutcome:
        """
        Post a new listing. Not retried on failure.
        
        Raises:
            MissingSessionError: If there is no session identity
        """
        if not session_id:
            raise MissingSessionError("Posting a listing requires a session")
        
        record = build_listing_record(form, session_id)
        
        try:
            listing_id = await self._store.create_document(self._collection_path, record)
        except DocumentStoreError as e:
            logger.error(f"Error adding ad: {str(e)}", exc_info=True)
            return SubmitOutcome(notice=SUBMIT_FAILED)
        
        logger.info(f"Listing {listing_id} ({form.type}) submitted by session {session_id}, awaiting approval")
        return SubmitOutcome(notice=SUBMIT_SUCCEEDED, listing_id=listing_id)
    
    async def delete(self, listing_id: str, session_id: Optional[str]) -> DeleteOutcome:
        """
        Permanently delete a listing.
        
        Only a session is required; ownership is not compared against the
        listing's user_id here.
        
        Raises:
            MissingSessionError: If there is no session identity
        """
        if not session_id:
            raise MissingSessionError("Deleting a listing requires a session")
        
        try:
            await self._store.delete_document(self._collection_path, listing_id)
        except DocumentNotFoundError as e:
            logger.warning(f"Delete of unknown listing {listing_id} by session {session_id}: {str(e)}")
            return DeleteOutcome(notice=DELETE_FAILED, deleted=False, not_found=True)
        except DocumentStoreError as e:
            logger.error(f"Error deleting ad: {str(e)}", exc_info=True)
            return DeleteOutcome(notice=DELETE_FAILED, deleted=False)
        
        logger.info(f"Listing {listing_id} deleted by session {session_id}")
        return DeleteOutcome(notice=DELETE_SUCCEEDED, deleted=True)
