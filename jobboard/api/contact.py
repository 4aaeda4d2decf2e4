"""
Contact endpoint.
Returns the confirmation to show and the tel:/mailto: URI to open on "yes".
"""
from fastapi import APIRouter

from jobboard.config import settings
from jobboard.schemas.contact import ContactRequest, ContactResponse
from jobboard.services.contact import describe_contact

router = APIRouter()


@router.post("/", response_model=ContactResponse)
async def prepare_contact(request: ContactRequest):
    """Nothing is stored; the hand-off happens in the client."""
    confirmation = describe_contact(request.kind, request.value, settings.phone_country_code)
    return ContactResponse(
        kind=confirmation.kind,
        title=confirmation.title,
        message=confirmation.message,
        uri=confirmation.uri,
    )
