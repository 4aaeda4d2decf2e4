"""
Listings API endpoints.
Handles the approved feed (snapshot and live stream), posting and deleting.
"""
import asyncio
import logging
from typing import Annotated, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from jobboard.api.auth import get_current_session
from jobboard.api.deps import get_store
from jobboard.config import settings
from jobboard.models.session import AnonymousSession
from jobboard.schemas.listing import (
    DeleteResponse,
    EmployerForm,
    FeedResponse,
    FeedView,
    FieldStateResponse,
    FormStateRequest,
    FormStateResponse,
    JobSeekerForm,
    SubmitResponse,
)
from jobboard.services.cards import build_listing_card, empty_feed_message
from jobboard.services.editor import ListingEditor
from jobboard.services.feed import ListingFeed
from jobboard.services.forms import form_state
from jobboard.services.store import DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

router = APIRouter()

# Seconds between keep-alive comments on an idle stream
KEEPALIVE_SECONDS = 15

ListingFormBody = Annotated[Union[JobSeekerForm, EmployerForm], Body(discriminator="type")]


def build_feed_response(feed: ListingFeed, view: FeedView) -> FeedResponse:
    documents = feed.visible(view)
    return FeedResponse(
        view=view,
        total=len(feed.listings),
        listings=[build_listing_card(document) for document in documents],
        empty_message=None if documents else empty_feed_message(view, len(feed.listings)),
    )


def offer_latest(queue: asyncio.Queue, item) -> None:
    """Queue a snapshot for a stream, replacing one the client has not read yet."""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(item)


# ============================================================
# FEED
# ============================================================

@router.get("/", response_model=FeedResponse)
async def list_listings(
    view: FeedView = Query(FeedView.ALL, description="all | job_seeker | employer"),
    current_session: AnonymousSession = Depends(get_current_session),
    store: DocumentStore = Depends(get_store)
):
    """
    Current snapshot of approved listings, newest first, filtered by view.
    """
    feed = ListingFeed(store, settings.collection_path())
    try:
        await feed.open(str(current_session.id))
    except DocumentStoreError as e:
        logger.error(f"Error loading feed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load listings.")
    finally:
        feed.close()
    
    logger.info(f"Listed {len(feed.visible(view))} of {len(feed.listings)} listings (view={view.value})")
    return build_feed_response(feed, view)


@router.get("/stream")
async def stream_listings(
    view: FeedView = Query(FeedView.ALL, description="all | job_seeker | employer"),
    max_events: Optional[int] = Query(None, ge=1, description="Close the stream after this many snapshots"),
    current_session: AnonymousSession = Depends(get_current_session),
    store: DocumentStore = Depends(get_store)
):
    """
    Live feed as server-sent events.
    
    Every event carries the full visible snapshot; clients replace, never
    merge. The subscription is released when the client disconnects.
    """
    updates: asyncio.Queue = asyncio.Queue(maxsize=1)
    feed = ListingFeed(
        store,
        settings.collection_path(),
        on_update=lambda f: offer_latest(updates, build_feed_response(f, view)),
    )
    try:
        await feed.open(str(current_session.id))
    except DocumentStoreError as e:
        feed.close()
        logger.error(f"Error opening live feed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load listings.")
    
    async def event_stream():
        sent = 0
        try:
            while max_events is None or sent < max_events:
                try:
                    snapshot = await asyncio.wait_for(updates.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield f"event: snapshot\ndata: {snapshot.model_dump_json()}\n\n"
                sent += 1
        finally:
            feed.close()
            logger.debug(f"Live feed closed for session {current_session.id}")
    
    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


# ============================================================
# EDITOR
# ============================================================

@router.post("/form-state", response_model=FormStateResponse)
async def read_form_state(request: FormStateRequest):
    """
    Value, enabled and required flags for every field of a form, given the
    typed values and the checked opt-out boxes.
    """
    fields = form_state(request.type, request.values, request.opt_outs)
    return FormStateResponse(
        type=request.type,
        fields={
            name: FieldStateResponse(value=state.value, enabled=state.enabled, required=state.required)
            for name, state in fields.items()
        },
    )


@router.post("/", response_model=SubmitResponse, status_code=201)
async def create_listing(
    form: ListingFormBody,
    current_session: AnonymousSession = Depends(get_current_session),
    store: DocumentStore = Depends(get_store)
):
    """
    Post a new listing. It stays hidden until approved by moderation.
    
    Returns:
        201: Listing stored, awaiting approval
        401: No session
        422: Form failed validation
        500: Store write failed; the client keeps the form for resubmission
    """
    editor = ListingEditor(store, settings.collection_path())
    outcome = await editor.submit(form, str(current_session.id))
    
    if not outcome.ok:
        raise HTTPException(status_code=500, detail=outcome.notice.message)
    
    return SubmitResponse(
        id=outcome.listing_id,
        notice=outcome.notice,
        clear_form=outcome.clear_form,
        close_editor=outcome.close_editor,
    )


@router.delete("/{listing_id}", response_model=DeleteResponse)
async def delete_listing(
    listing_id: str,
    current_session: AnonymousSession = Depends(get_current_session),
    store: DocumentStore = Depends(get_store)
):
    """
    Permanently delete a listing.
    
    Any session may delete any id; ownership has to be enforced by the
    deployment's access rules.
    """
    editor = ListingEditor(store, settings.collection_path())
    outcome = await editor.delete(listing_id, str(current_session.id))
    
    if outcome.not_found:
        raise HTTPException(status_code=404, detail=f"Listing {listing_id} not found")
    if not outcome.deleted:
        raise HTTPException(status_code=500, detail=outcome.notice.message)
    
    return DeleteResponse(id=listing_id, notice=outcome.notice)
