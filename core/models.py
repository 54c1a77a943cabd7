"""
core/models.py -- Domain enums and value objects shared by every layer.

Role codes, gender codes and error type identifiers are part of the wire
contract consumed by the frontend, so their string values must not change.
"""

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Roles and gender
# ---------------------------------------------------------------------------


class RolesSistema(str, Enum):
    Directivo = "D"
    ProfesorPrimaria = "PP"
    Auxiliar = "A"
    ProfesorSecundaria = "PS"
    Tutor = "T"
    Responsable = "R"
    PersonalAdministrativo = "PA"


class Genero(str, Enum):
    Masculino = "M"
    Femenino = "F"


# ---------------------------------------------------------------------------
# Error types (the "errorType" field of every error response)
# ---------------------------------------------------------------------------


class RequestErrorTypes(str, Enum):
    MISSING_PARAMETERS = "MISSING_PARAMETERS"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"


class PermissionErrorTypes(str, Enum):
    ROLE_BLOCKED = "ROLE_BLOCKED"


class UserErrorTypes(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_INACTIVE = "USER_INACTIVE"


class SystemErrorTypes(str, Enum):
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


# ---------------------------------------------------------------------------
# Lockout details
# ---------------------------------------------------------------------------


@dataclass
class RoleBlockDetails:
    """Computed view of a role lockout, returned to clients on 403.

    Field names match the JSON keys of the "details" object.
    """

    tiempoActualUTC: int
    timestampDesbloqueoUTC: int
    tiempoRestante: str
    fechaDesbloqueo: str
    esBloqueoPermanente: bool
