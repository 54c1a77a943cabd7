"""
API request and response models for StaffLogin REST endpoints.

These Pydantic v2 models define the HTTP transport contract. Field names are
the exact JSON keys the frontend reads (Nombre_Usuario, errorType, ...), so
they intentionally do not follow snake_case. The dataclasses in auth/models.py
own the internal representation; route handlers map between the two.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import PersonalAdministrativo
from core.models import Genero as GeneroEnum
from core.models import RolesSistema

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/login/personal-administrativo.

    Both fields are optional at the schema level: a missing or empty value is
    reported by the route as MISSING_PARAMETERS rather than as a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    nombre_usuario: Optional[str] = Field(default=None, alias="Nombre_Usuario", max_length=255)
    contrasena: Optional[str] = Field(default=None, alias="Contraseña", max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginData(BaseModel):
    """Session payload returned on a successful login."""

    model_config = ConfigDict(frozen=True)

    Apellidos: str
    Nombres: str
    Rol: RolesSistema
    token: str
    Google_Drive_Foto_ID: Optional[str] = None
    Genero: GeneroEnum

    @classmethod
    def from_personal(cls, personal: PersonalAdministrativo, token: str) -> "LoginData":
        return cls(
            Apellidos=personal.apellidos,
            Nombres=personal.nombres,
            Rol=RolesSistema.PersonalAdministrativo,
            token=token,
            Google_Drive_Foto_ID=personal.google_drive_foto_id,
            Genero=GeneroEnum(personal.genero),
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str
    data: LoginData


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    message: str
    errorType: str
    details: Optional[dict[str, Any]] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
