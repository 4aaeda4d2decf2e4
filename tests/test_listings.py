"""
Tests for the listings API: feed, live stream, form state, create and delete.

The fixtures (async_client, client, db) handle all cleanup automatically.
Each test gets a fresh in-memory SQLite database that's destroyed after the test.
"""
import asyncio
import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.deps import get_store
from jobboard.api.listings import offer_latest
from jobboard.main import app
from jobboard.models.listing import Listing
from jobboard.models.session import AnonymousSession
from jobboard.schemas.listing import EMAIL_OPT_OUT, SKILLS_OPT_OUT
from jobboard.services.store import DocumentStore, DocumentStoreError


class FailingStore(DocumentStore):
    async def create_document(self, collection_path, record):
        raise DocumentStoreError("write refused")


def parse_events(body: str) -> list:
    """Snapshot payloads from a server-sent event stream."""
    events = []
    for block in body.split("\n\n"):
        lines = block.strip().splitlines()
        if lines and lines[0] == "event: snapshot":
            events.append(json.loads(lines[1][len("data: "):]))
    return events


# ============================================================
# FEED
# ============================================================

@pytest.mark.asyncio
async def test_feed_requires_session(async_client: AsyncClient):
    response = await async_client.get("/api/listings/")
    
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_feed_shows_only_approved_newest_first(client: AsyncClient, make_listing):
    """
    Test: Only approved listings are shown, newest first
    
    Verifies:
    - Unapproved listings never appear
    - Listings without a timestamp sort last
    """
    old = await make_listing(job_title="Old", minutes=0)
    new = await make_listing(variant="employer", company="New MMC", minutes=10)
    undated = await make_listing(job_title="Undated", minutes=None)
    await make_listing(job_title="Pending", approved=False, minutes=20)
    
    response = await client.get("/api/listings/")
    
    assert response.status_code == 200
    data = response.json()
    assert data["view"] == "all"
    assert data["total"] == 3
    assert [card["id"] for card in data["listings"]] == [str(new.id), str(old.id), str(undated.id)]
    assert data["empty_message"] is None


@pytest.mark.asyncio
async def test_feed_views(client: AsyncClient, make_listing):
    seeker = await make_listing(job_title="Developer", minutes=0)
    employer = await make_listing(variant="employer", company="Axtarget MMC", minutes=5)
    
    seekers = (await client.get("/api/listings/", params={"view": "job_seeker"})).json()
    employers = (await client.get("/api/listings/", params={"view": "employer"})).json()
    
    assert [card["id"] for card in seekers["listings"]] == [str(seeker.id)]
    assert seekers["listings"][0]["title"] == "İş Axtaran: Developer"
    assert [card["id"] for card in employers["listings"]] == [str(employer.id)]
    assert employers["total"] == 2


@pytest.mark.asyncio
async def test_feed_empty_messages(client: AsyncClient, make_listing):
    data = (await client.get("/api/listings/")).json()
    assert data["listings"] == []
    assert data["empty_message"] == "Elanlar yüklənir..."
    
    await make_listing(variant="employer", company="Axtarget MMC")
    data = (await client.get("/api/listings/", params={"view": "job_seeker"})).json()
    assert data["empty_message"] == "Hələlik aktiv iş axtaran elanı yoxdur."


@pytest.mark.asyncio
async def test_feed_rejects_unknown_view(client: AsyncClient):
    response = await client.get("/api/listings/", params={"view": "pending"})
    
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_feed_does_not_leak_subscriptions(client: AsyncClient, store: DocumentStore):
    await client.get("/api/listings/")
    
    assert store.subscription_count == 0


# ============================================================
# LIVE STREAM
# ============================================================

@pytest.mark.asyncio
async def test_stream_sends_full_snapshot(client: AsyncClient, store: DocumentStore, make_listing):
    listing = await make_listing(job_title="Developer")
    
    response = await client.get("/api/listings/stream", params={"max_events": 1})
    
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = parse_events(response.text)
    assert len(events) == 1
    assert [card["id"] for card in events[0]["listings"]] == [str(listing.id)]
    assert store.subscription_count == 0


def test_stream_queue_keeps_only_latest_snapshot():
    """A slow client gets the newest snapshot, not a backlog."""
    updates = asyncio.Queue(maxsize=1)
    
    offer_latest(updates, "first")
    offer_latest(updates, "second")
    offer_latest(updates, "third")
    
    assert updates.qsize() == 1
    assert updates.get_nowait() == "third"


@pytest.mark.asyncio
async def test_stream_requires_session(async_client: AsyncClient):
    response = await async_client.get("/api/listings/stream", params={"max_events": 1})
    
    assert response.status_code == 401


# ============================================================
# FORM STATE
# ============================================================

@pytest.mark.asyncio
async def test_form_state(async_client: AsyncClient):
    response = await async_client.post(
        "/api/listings/form-state",
        json={
            "type": "job_seeker",
            "values": {"email": "ali@example.com", "skills": "JS"},
            "opt_outs": ["skills"],
        },
    )
    
    assert response.status_code == 200
    fields = response.json()["fields"]
    assert fields["skills"] == {"value": SKILLS_OPT_OUT, "enabled": False, "required": False}
    assert fields["email"] == {"value": "ali@example.com", "enabled": True, "required": True}


@pytest.mark.asyncio
async def test_form_state_unchecking_clears_sentinel(async_client: AsyncClient):
    response = await async_client.post(
        "/api/listings/form-state",
        json={"type": "employer", "values": {"email": EMAIL_OPT_OUT}, "opt_outs": []},
    )
    
    assert response.json()["fields"]["email"] == {"value": "", "enabled": True, "required": True}


# ============================================================
# CREATE
# ============================================================

@pytest.mark.asyncio
async def test_create_listing(
    client: AsyncClient,
    db: AsyncSession,
    test_session: AnonymousSession,
    job_seeker_form: dict
):
    """
    Test: Posting a listing stores it unapproved and hidden from the feed
    
    What happens:
    1. POST /api/listings/ with a valid job seeker form
    2. Listing row is created with approved=False and the session as owner
    3. The approved feed is unchanged
    """
    response = await client.post("/api/listings/", json=job_seeker_form)
    
    assert response.status_code == 201
    data = response.json()
    assert data["notice"]["title"] == "Uğurlu!"
    assert data["clear_form"] is True
    assert data["close_editor"] is True
    
    result = await db.execute(select(Listing))
    listing = result.scalar_one()
    assert str(listing.id) == data["id"]
    assert listing.approved is False
    assert str(listing.user_id) == str(test_session.id)
    assert listing.contact_number == "512345678"
    assert listing.created_at is not None
    
    feed = (await client.get("/api/listings/")).json()
    assert feed["total"] == 0


@pytest.mark.asyncio
async def test_create_employer_listing_with_opt_outs(client: AsyncClient, db: AsyncSession, employer_form: dict):
    employer_form.pop("company")
    employer_form["opt_outs"] = ["company", "email"]
    
    response = await client.post("/api/listings/", json=employer_form)
    
    assert response.status_code == 201
    result = await db.execute(select(Listing))
    listing = result.scalar_one()
    assert listing.variant == "employer"
    assert listing.company == "Şəxsi Elan"
    assert listing.email == EMAIL_OPT_OUT


@pytest.mark.asyncio
async def test_create_listing_requires_session(async_client: AsyncClient, job_seeker_form: dict):
    response = await async_client.post("/api/listings/", json=job_seeker_form)
    
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_listing_validation_error(client: AsyncClient, db: AsyncSession, job_seeker_form: dict):
    job_seeker_form["contact_number"] = "512345678"
    
    response = await client.post("/api/listings/", json=job_seeker_form)
    
    assert response.status_code == 422
    result = await db.execute(select(Listing))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_create_listing_store_failure(client: AsyncClient, make_listing, job_seeker_form: dict):
    """Test: A failed write reports the failure and leaves the feed as it was"""
    await make_listing(job_title="Existing")
    app.dependency_overrides[get_store] = lambda: FailingStore()
    
    response = await client.post("/api/listings/", json=job_seeker_form)
    
    assert response.status_code == 500
    assert response.json()["detail"] == "Elanınızı paylaşmaq mümkün olmadı."
    
    feed = (await client.get("/api/listings/")).json()
    assert feed["total"] == 1


# ============================================================
# DELETE
# ============================================================

@pytest.mark.asyncio
async def test_delete_listing(client: AsyncClient, make_listing):
    listing = await make_listing()
    
    response = await client.delete(f"/api/listings/{listing.id}")
    
    assert response.status_code == 200
    assert response.json()["notice"]["message"] == "Elanınız uğurla silindi."
    
    feed = (await client.get("/api/listings/")).json()
    assert feed["total"] == 0


@pytest.mark.asyncio
async def test_delete_unknown_listing(client: AsyncClient):
    response = await client.delete("/api/listings/00000000-0000-0000-0000-00000000ffff")
    
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_requires_session(async_client: AsyncClient, make_listing):
    listing = await make_listing()
    
    response = await async_client.delete(f"/api/listings/{listing.id}")
    
    assert response.status_code == 401


# ============================================================
# CONTACT
# ============================================================

@pytest.mark.asyncio
async def test_contact_phone(async_client: AsyncClient):
    response = await async_client.post("/api/contact/", json={"kind": "phone", "value": "512345678"})
    
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Zəng Təsdiqi"
    assert data["message"] == "Siz +994 (512345678) nömrəsinə zəng etmək istəyirsiniz?"
    assert data["uri"] == "tel:+994512345678"
    assert data["confirm_label"] == "Bəli"
    assert data["cancel_label"] == "Xeyr"


@pytest.mark.asyncio
async def test_contact_email(async_client: AsyncClient):
    response = await async_client.post("/api/contact/", json={"kind": "email", "value": "hr@sirket.az"})
    
    assert response.status_code == 200
    assert response.json()["uri"] == "mailto:hr@sirket.az"
