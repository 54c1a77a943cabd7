"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the staff DNI (ID_Usuario), username and role code, plus iat/exp.
       Verification returns None on any failure.

  Passwords: bcrypt used directly. The _DUMMY_HASH constant enables timing
       equalization in verify_personal_password() so response time does not
       reveal whether a username exists [C1].

  SECRET_KEY: sourced from core.config.get_settings(), which validates it at
       startup [M6].

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings
from core.models import RolesSistema

if TYPE_CHECKING:
    from auth.models import PersonalAdministrativo

logger = logging.getLogger("stafflogin.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton [M6]
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes; the API layer caps passwords at
    255 characters, and the CLI warns on longer input.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


# Timing equalization dummy hash [C1].
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("stafflogin_timing_dummy")


def verify_personal_password(personal: PersonalAdministrativo | None, plain: str) -> bool:
    """Check a password for an account that may not exist.

    Always runs bcrypt: against _DUMMY_HASH when personal is None, against the
    stored hash otherwise. Returns False for unknown accounts.
    """
    if personal is None:
        verify_password(plain, _DUMMY_HASH)
        return False
    return verify_password(plain, personal.hashed_password)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_personal_administrativo_token(dni: str, username: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT for a Personal Administrativo session.

    Args:
        dni:            Staff DNI, stored as the ID_Usuario claim.
        username:       Nombre_Usuario, also used as the subject claim.
        expire_seconds: Token lifetime. 0 (default) uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "ID_Usuario": dni,
        "Nombre_Usuario": username,
        "Rol": RolesSistema.PersonalAdministrativo.value,
        "iat": issued,
        "exp": issued + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    Tokens missing the identity claims are rejected as well.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if "ID_Usuario" not in payload or "Rol" not in payload:
        return None
    return payload
