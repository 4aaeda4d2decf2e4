"""
Declarative form state for the listing editor.

Every field's (value, enabled, required) triple is computed from the typed
value and the field's opt-out flag, instead of being patched when a checkbox
changes. A checked opt-out yields the sentinel, disabled and optional; an
unchecked one yields an empty, enabled, required field.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from jobboard.schemas.listing import EmployerForm, JobSeekerForm, OptOutField

FORMS = {
    "job_seeker": JobSeekerForm,
    "employer": EmployerForm,
}

# Fields each form shows, in display order
FORM_FIELDS = {
    "job_seeker": (
        "contact_number", "email", "skills", "work_mode", "job_title",
        "gender", "age", "experience", "region", "full_name", "hide_my_name",
    ),
    "employer": (
        "company", "experience", "email", "contact_number", "gender",
        "worker_mode", "region", "age_range", "required_skills", "full_name",
        "hide_my_name",
    ),
}

OPTIONAL_FIELDS = {"hide_my_name"}


@dataclass(frozen=True)
class FieldState:
    value: str
    enabled: bool
    required: bool


def field_state(sentinel: Optional[str], value: str, opted_out: bool, required: bool = True) -> FieldState:
    if opted_out and sentinel is not None:
        return FieldState(value=sentinel, enabled=False, required=False)
    if sentinel is not None and value == sentinel:
        # Unchecking clears the sentinel left behind
        value = ""
    return FieldState(value=value, enabled=True, required=required)


def form_state(
    variant: str,
    values: Mapping[str, str],
    opt_outs: Iterable[OptOutField] = ()
) -> dict[str, FieldState]:
    """State of every field on a variant's form."""
    sentinels = FORMS[variant].OPT_OUTS
    checked = {OptOutField(field).value for field in opt_outs}
    values = dict(values)
    phone = values.get("contact_number")
    if phone and phone != sentinels.get("contact_number"):
        values["contact_number"] = format_phone_number(phone)
    return {
        name: field_state(
            sentinels.get(name),
            values.get(name, ""),
            name in checked,
            required=name not in OPTIONAL_FIELDS,
        )
        for name in FORM_FIELDS[variant]
    }


def format_phone_number(value: str) -> str:
    """Format phone input as the user types: at most 9 digits, grouped XX-XXX-XX-XX."""
    digits = re.sub(r"[^0-9]", "", value)[:9]
    groups = [digits[0:2], digits[2:5], digits[5:7], digits[7:9]]
    return "-".join(group for group in groups if group)
