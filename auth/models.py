"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PersonalAdministrativo:
    """An administrative staff account.

    dni is the national ID number and doubles as the primary key.
    hashed_password is a bcrypt hash; the plaintext is never stored.
    estado False means the account was disabled by an administrator.
    """

    dni: str
    nombre_usuario: str
    hashed_password: str
    nombres: str
    apellidos: str
    genero: str  # "M" or "F"
    estado: bool = True
    google_drive_foto_id: str | None = None
    celular: str | None = None
    cargo: str | None = None


@dataclass
class RoleBlock:
    """An administrative lockout that applies to every account of one role.

    timestamp_desbloqueo is a unix timestamp in seconds; 0 means no end date.
    """

    rol: str
    timestamp_desbloqueo: int
    bloqueo_total: bool = True
    id: int | None = None
