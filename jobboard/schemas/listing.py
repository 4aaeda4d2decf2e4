"""Listing-related Pydantic schemas."""
import enum
import re
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.networks import validate_email

from jobboard.models.listing import (
    AgeRange,
    EmployerExperience,
    Gender,
    SeekerExperience,
    WorkMode,
)

# Phone input as typed into the form: XX-XXX-XX-XX
PHONE_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{3}-[0-9]{2}-[0-9]{2}$")

# Values written in place of an opted-out field
PHONE_OPT_OUT = "Paylaşmaq istəmirəm"  # declined
EMAIL_OPT_OUT = "E-poçt yoxdur"  # no email
SKILLS_OPT_OUT = "Bacarığım yoxdur"  # no skills
ANY_OPT_OUT = "Fərqi yoxdur"  # any
COMPANY_OPT_OUT = "Şəxsi Elan"  # personal listing


class OptOutField(str, enum.Enum):
    """Form fields that can be replaced by a sentinel via a checkbox."""
    CONTACT_NUMBER = "contact_number"
    EMAIL = "email"
    SKILLS = "skills"
    REGION = "region"
    COMPANY = "company"
    REQUIRED_SKILLS = "required_skills"


class FeedView(str, enum.Enum):
    """Client-side filter over the approved feed."""
    ALL = "all"
    JOB_SEEKER = "job_seeker"
    EMPLOYER = "employer"


class ListingFormBase(BaseModel):
    """Fields shared by both listing forms."""
    model_config = ConfigDict(str_strip_whitespace=True)
    
    # Sentinel per field this form lets the user opt out of
    OPT_OUTS: ClassVar[dict[str, str]] = {}
    
    full_name: str = Field(min_length=1, max_length=255)
    hide_my_name: bool = False
    contact_number: str = Field(min_length=1)
    email: str = Field(min_length=1, max_length=255)
    region: str = Field(min_length=1, max_length=255)
    opt_outs: list[OptOutField] = Field(default_factory=list)
    
    @model_validator(mode="before")
    @classmethod
    def apply_opt_outs(cls, data):
        """Force the sentinel into every opted-out field before validation."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field in data.get("opt_outs") or []:
            name = field.value if isinstance(field, OptOutField) else str(field)
            if name not in cls.OPT_OUTS:
                raise ValueError(f"'{name}' cannot be opted out on this form")
            data[name] = cls.OPT_OUTS[name]
        return data
    
    @field_validator("contact_number")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if value == cls.OPT_OUTS.get("contact_number"):
            return value
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must look like XX-XXX-XX-XX")
        return value
    
    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if value == EMAIL_OPT_OUT:
            return value
        _, email = validate_email(value)
        return email


class JobSeekerForm(ListingFormBase):
    """Form for a "looking for work" listing."""
    OPT_OUTS: ClassVar[dict[str, str]] = {
        "contact_number": PHONE_OPT_OUT,
        "email": EMAIL_OPT_OUT,
        "skills": SKILLS_OPT_OUT,
        "region": ANY_OPT_OUT,
    }
    
    type: Literal["job_seeker"] = "job_seeker"
    skills: str = Field(min_length=1)
    work_mode: WorkMode
    job_title: str = Field(min_length=1, max_length=255)
    gender: Gender
    age: int = Field(ge=18, le=99)
    experience: SeekerExperience
    
    @field_validator("gender")
    @classmethod
    def check_gender(cls, value: Gender) -> Gender:
        if value == Gender.ANY:
            raise ValueError("Job seekers must choose male or female")
        return value


class EmployerForm(ListingFormBase):
    """Form for a "looking for a worker" listing."""
    OPT_OUTS: ClassVar[dict[str, str]] = {
        "company": COMPANY_OPT_OUT,
        "email": EMAIL_OPT_OUT,
        "region": ANY_OPT_OUT,
        "required_skills": ANY_OPT_OUT,
    }
    
    type: Literal["employer"] = "employer"
    company: str = Field(min_length=1, max_length=255)
    worker_mode: WorkMode
    age_range: AgeRange
    experience: EmployerExperience
    required_skills: str = Field(min_length=1)
    gender: Gender


ListingForm = Annotated[Union[JobSeekerForm, EmployerForm], Field(discriminator="type")]


class Notice(BaseModel):
    """Title and message of the alert shown after an action."""
    title: str
    message: str


class SubmitResponse(BaseModel):
    """Response after posting a listing."""
    id: str
    notice: Notice
    clear_form: bool = True
    close_editor: bool = True


class DeleteResponse(BaseModel):
    """Response after deleting a listing."""
    id: str
    notice: Notice


class FormStateRequest(BaseModel):
    """Current raw form input plus the checked opt-out boxes."""
    type: Literal["job_seeker", "employer"]
    values: dict[str, str] = Field(default_factory=dict)
    opt_outs: list[OptOutField] = Field(default_factory=list)


class FieldStateResponse(BaseModel):
    value: str
    enabled: bool
    required: bool


class FormStateResponse(BaseModel):
    type: str
    fields: dict[str, FieldStateResponse]


class CardLine(BaseModel):
    label: str
    value: str


class CardContact(BaseModel):
    """Contact block at the bottom of a card."""
    phone_display: str
    phone: Optional[str] = None
    can_call: bool
    email_display: str
    email: Optional[str] = None
    can_email: bool
    name_hidden: bool


class ListingCard(BaseModel):
    """One listing as the page renders it."""
    id: str
    variant: str
    title: str
    display_name: Optional[str] = None
    summary: list[CardLine]
    details: list[CardLine]
    badges: list[str]
    contact: CardContact
    posted_at: str


class FeedResponse(BaseModel):
    """Visible listings for one view of the feed."""
    view: FeedView
    total: int
    listings: list[ListingCard]
    empty_message: Optional[str] = None
