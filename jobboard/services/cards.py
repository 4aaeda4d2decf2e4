"""Render listings as the page's cards (Azerbaijani labels)."""
from datetime import datetime
from typing import Optional

from jobboard.models.listing import ListingVariant
from jobboard.schemas.listing import (
    ANY_OPT_OUT,
    EMAIL_OPT_OUT,
    PHONE_OPT_OUT,
    SKILLS_OPT_OUT,
    CardContact,
    CardLine,
    FeedView,
    ListingCard,
)
from jobboard.services.store import DocumentSnapshot

NOT_AVAILABLE = "Yoxdur"

GENDER_LABELS = {
    "male": "Kişi",
    "female": "Qadın",
    "any": "Fərqi yoxdur",
}

SEEKER_WORK_MODE_LABELS = {"online": "Online İş", "physical": "Fiziki İş"}
EMPLOYER_WORK_MODE_LABELS = {"online": "Online İşçi", "physical": "Fiziki İşçi"}

SEEKER_EXPERIENCE_LABELS = {"none": "Yoxdur"}
EMPLOYER_EXPERIENCE_LABELS = {"none": "Təcrübəsiz"}


def experience_label(variant: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    labels = SEEKER_EXPERIENCE_LABELS if variant == ListingVariant.JOB_SEEKER.value else EMPLOYER_EXPERIENCE_LABELS
    return labels.get(value, f"{value} il")


def work_mode_label(document: DocumentSnapshot) -> str:
    if document.get("variant") == ListingVariant.JOB_SEEKER.value:
        return SEEKER_WORK_MODE_LABELS.get(document.get("work_mode"), "Fiziki İş")
    return EMPLOYER_WORK_MODE_LABELS.get(document.get("worker_mode"), "Fiziki İşçi")


def display_name(document: DocumentSnapshot) -> Optional[str]:
    """The author's name, only if given and not hidden."""
    name = document.get("full_name")
    if name and not document.get("hide_my_name"):
        return name
    return None


def format_posted_at(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%d.%m.%Y %H:%M:%S")
    return "Tarix yoxdur"


def _region(document: DocumentSnapshot) -> Optional[str]:
    region = document.get("region")
    if region and region != ANY_OPT_OUT:
        return region
    return None


def _contact(document: DocumentSnapshot) -> CardContact:
    phone = document.get("contact_number")
    if phone == PHONE_OPT_OUT:
        phone = None
    email = document.get("email")
    return CardContact(
        phone_display=f"+994 ({phone})" if phone else f"+994 ({NOT_AVAILABLE})",
        phone=phone or None,
        can_call=bool(phone),
        email_display=email or NOT_AVAILABLE,
        email=email or None,
        can_email=bool(email) and email != EMAIL_OPT_OUT,
        name_hidden=bool(document.get("hide_my_name")),
    )


def build_listing_card(document: DocumentSnapshot) -> ListingCard:
    variant = document.get("variant")
    is_job_seeker = variant == ListingVariant.JOB_SEEKER.value
    name = display_name(document)
    region = _region(document)
    experience = experience_label(variant, document.get("experience"))
    
    summary = []
    details = []
    if is_job_seeker:
        title = f"İş Axtaran: {document.get('job_title') or 'Vəzifə Qeyd Olunmayıb'}"
        skills = document.get("skills")
        summary.append(CardLine(
            label="Bacarıqlar",
            value="Bacarıq yoxdur" if skills == SKILLS_OPT_OUT else (skills or ""),
        ))
        if name:
            details.append(CardLine(label="Ad", value=name))
        details.append(CardLine(label="Yaş", value=f"{document.get('age')} yaş"))
        details.append(CardLine(label="Təcrübə", value=experience or ""))
        details.append(CardLine(label="İş forması", value=work_mode_label(document)))
    else:
        company = document.get("company") or "Şəxsi elan"
        title = f"İşçi Axtarılır: {document.get('company') or 'Şəxsi Elan'}"
        summary.append(CardLine(label="Şirkət", value=company))
        summary.append(CardLine(
            label="Tələb olunan biliklər",
            value=document.get("required_skills") or "Qeyd edilməyib",
        ))
        if name:
            details.append(CardLine(label="Əlaqədar şəxs", value=name))
        details.append(CardLine(label="Yaş aralığı", value=document.get("age_range") or ""))
        details.append(CardLine(label="Tələb olunan təcrübə", value=experience or ""))
        details.append(CardLine(label="İşçi forması", value=work_mode_label(document)))
    if region:
        details.append(CardLine(label="Bölgə", value=region))
    
    badges = []
    gender = document.get("gender")
    if gender:
        badges.append(GENDER_LABELS.get(gender, gender))
    if region:
        badges.append(region)
    badges.append(work_mode_label(document))
    if document.get("age"):
        badges.append(f"{document.get('age')} yaş")
    if document.get("age_range"):
        badges.append(f"{document.get('age_range')} yaş aralığı")
    if experience:
        badges.append(f"{experience} Təcrübə")
    
    return ListingCard(
        id=document.id,
        variant=variant or "",
        title=title,
        display_name=name,
        summary=summary,
        details=details,
        badges=badges,
        contact=_contact(document),
        posted_at=format_posted_at(document.get("created_at")),
    )


def empty_feed_message(view: FeedView, total: int) -> str:
    """Text shown when a view has no listings."""
    if total == 0:
        return "Elanlar yüklənir..."
    kind = {
        FeedView.JOB_SEEKER: "iş axtaran",
        FeedView.EMPLOYER: "işçi axtaran",
    }.get(FeedView(view))
    return " ".join(part for part in ("Hələlik aktiv", kind, "elanı yoxdur.") if part)
