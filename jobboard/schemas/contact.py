"""Contact-related Pydantic schemas."""
import enum
from pydantic import BaseModel, Field


class ContactKind(str, enum.Enum):
    PHONE = "phone"
    EMAIL = "email"


class ContactRequest(BaseModel):
    """Request to contact a listing's author."""
    kind: ContactKind
    value: str = Field(min_length=1)


class ContactResponse(BaseModel):
    """Yes/no confirmation to show before handing off to the dialer or mail client."""
    kind: ContactKind
    title: str
    message: str
    confirm_label: str = "Bəli"
    cancel_label: str = "Xeyr"
    uri: str
