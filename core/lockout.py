"""
core/lockout.py -- Role lockout evaluation.

Pure functions: no I/O, no clock reads. The caller passes "now" so the same
inputs always produce the same details, which keeps the 403 payload testable.

Rules:
  - An unlock timestamp of 0 (or negative) means the block has no end date.
  - An unlock timestamp already in the past is also reported as permanent:
    the block row is still marked active, so only an administrator can lift it.
  - Remaining time is whole hours plus leftover whole minutes; hours are not
    folded into days.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from core.models import RoleBlockDetails

PERMANENT_REMAINING = "Permanente"
UNDEFINED_DATE = "No definida"


def is_permanent(unlock_timestamp: int, now: int) -> bool:
    return unlock_timestamp <= 0 or unlock_timestamp <= now


def format_remaining(seconds: int) -> str:
    """Render a positive number of seconds as '<h>h <m>m' (e.g. '26h 5m')."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def format_unlock_date(unlock_timestamp: int, tz_name: str) -> str:
    """Render a unix timestamp as 'DD/MM/YYYY, HH:MM' in the given IANA zone.

    Timestamps outside the range datetime can represent (e.g. milliseconds
    written by another client) render as UNDEFINED_DATE.
    """
    try:
        moment = datetime.fromtimestamp(unlock_timestamp, tz=timezone.utc).astimezone(ZoneInfo(tz_name))
    except (ValueError, OverflowError, OSError):
        return UNDEFINED_DATE
    return moment.strftime("%d/%m/%Y, %H:%M")


def build_block_details(unlock_timestamp: int | str, now: int, tz_name: str) -> RoleBlockDetails:
    """Evaluate a role block against the current time.

    unlock_timestamp may arrive as a string or Decimal from some database
    drivers (BIGINT columns); it is coerced to int before comparison.
    """
    unlock = int(unlock_timestamp)
    permanent = is_permanent(unlock, now)

    remaining = PERMANENT_REMAINING
    unlock_date = UNDEFINED_DATE
    if not permanent:
        remaining = format_remaining(unlock - now)
        unlock_date = format_unlock_date(unlock, tz_name)

    return RoleBlockDetails(
        tiempoActualUTC=now,
        timestampDesbloqueoUTC=unlock,
        tiempoRestante=remaining,
        fechaDesbloqueo=unlock_date,
        esBloqueoPermanente=permanent,
    )


def block_message(details: RoleBlockDetails) -> str:
    if details.esBloqueoPermanente:
        return "El acceso para personal administrativo está permanentemente bloqueado"
    return "El acceso para personal administrativo está temporalmente bloqueado"
