"""Contact initiation: a yes/no confirmation, then a hand-off to the dialer or mail client."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

from jobboard.schemas.contact import ContactKind

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "+994"


@dataclass(frozen=True)
class ContactConfirmation:
    kind: ContactKind
    value: str
    title: str
    message: str
    uri: str


def contact_uri(kind: ContactKind, value: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    if ContactKind(kind) == ContactKind.PHONE:
        return f"tel:{quote(country_code + value, safe='+')}"
    return f"mailto:{quote(value, safe='@+')}"


def describe_contact(
    kind: ContactKind,
    value: str,
    country_code: str = DEFAULT_COUNTRY_CODE
) -> ContactConfirmation:
    kind = ContactKind(kind)
    if kind == ContactKind.PHONE:
        title = "Zəng Təsdiqi"
        message = f"Siz {country_code} ({value}) nömrəsinə zəng etmək istəyirsiniz?"
    else:
        title = "E-mail Təsdiqi"
        message = f"Siz {value} ünvanına e-mail göndərmək istəyirsiniz?"
    return ContactConfirmation(
        kind=kind,
        value=value,
        title=title,
        message=message,
        uri=contact_uri(kind, value, country_code),
    )


class ContactPrompt:
    """
    Pending contact confirmation for one page.
    
    The handler receives the tel:/mailto: URI on confirmation; its result is
    ignored and nothing is persisted.
    """
    
    def __init__(self, handler: Callable[[str], Any], country_code: str = DEFAULT_COUNTRY_CODE):
        self._handler = handler
        self._country_code = country_code
        self.pending: Optional[ContactConfirmation] = None
    
    @property
    def is_open(self) -> bool:
        return self.pending is not None
    
    def request(self, kind: ContactKind, value: str) -> ContactConfirmation:
        self.pending = describe_contact(kind, value, self._country_code)
        return self.pending
    
    def confirm(self) -> Optional[str]:
        """Hand the pending URI to the handler and close. Returns the URI used."""
        if self.pending is None:
            return None
        uri = self.pending.uri
        self.pending = None
        self._handler(uri)
        logger.debug(f"Handed off contact URI {uri}")
        return uri
    
    def cancel(self) -> None:
        self.pending = None
