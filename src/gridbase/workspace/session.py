"""Who is signed in, and the small display helpers the base list uses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

MINUTE = 60.0
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY


@dataclass(frozen=True)
class Session:
    user_id: str
    display_name: str = ""


@runtime_checkable
class SessionProvider(Protocol):
    def current(self) -> Optional[Session]: ...


class StaticSessionProvider:
    """Session provider holding one fixed session (or none, when signed out)."""

    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session

    def current(self) -> Optional[Session]:
        return self._session

    def sign_in(self, session: Session) -> None:
        self._session = session

    def sign_out(self) -> None:
        self._session = None


def _format_char(char: str, index: int) -> str:
    if char.isascii() and char.isalpha():
        return char.upper() if index == 0 else char.lower()
    return char


def format_initials(name: str) -> str:
    """Two-character badge for a base, e.g. ``"Project plan" -> "Pr"``; ``"??"`` when blank."""
    chars = name.strip()[:2]
    initials = "".join(_format_char(c, i) for i, c in enumerate(chars))
    return initials or "??"


def format_user_initial(name: str) -> str:
    first = name.strip()[:1]
    if not first:
        return "?"
    return _format_char(first, 0)


def _plural(value: int, unit: str) -> str:
    return f"Opened {value} {unit}{'' if value == 1 else 's'} ago"


def format_last_opened(opened_at: datetime, now: Optional[datetime] = None) -> str:
    """Relative "Opened ... ago" label. Months are 30 days, years 365."""
    now = now or datetime.now(timezone.utc)
    seconds = max(0.0, (now - opened_at).total_seconds())

    if seconds < MINUTE:
        return "Opened just now"
    if seconds < HOUR:
        return _plural(int(seconds // MINUTE), "minute")
    if seconds < DAY:
        return _plural(int(seconds // HOUR), "hour")
    if seconds < WEEK:
        return _plural(int(seconds // DAY), "day")
    if seconds < MONTH:
        return _plural(int(seconds // WEEK), "week")
    if seconds < YEAR:
        return _plural(int(seconds // MONTH), "month")
    return _plural(int(seconds // YEAR), "year")
