"""
auth/store.py -- SQLAlchemy Core persistence layer for staff accounts and role blocks.

Pattern: Repository + Data Mapper.
StaffStore is the repository; _row_to_personal / _row_to_role_block are the
mappers. Route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Column names keep the legacy schema's spelling (e.g. "Contraseña",
"Nombre_Usuario") so the store can point at the existing database. Rows are
read through their mapping keyed by Column objects, which avoids attribute
access on non-ASCII names.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    select,
    text,
)
from sqlalchemy.engine import Engine

from auth.models import PersonalAdministrativo, RoleBlock

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_personal = Table(
    "personal_administrativo",
    _metadata,
    Column("DNI_Personal_Administrativo", String(8), primary_key=True),
    Column("Nombre_Usuario", String(40), nullable=False, unique=True),
    Column("Contraseña", Text, nullable=False),
    Column("Nombres", String(60), nullable=False),
    Column("Apellidos", String(60), nullable=False),
    Column("Genero", String(1), nullable=False),
    Column("Estado", Boolean, nullable=False, server_default="1"),
    Column("Google_Drive_Foto_ID", String(255)),
    Column("Celular", String(9)),
    Column("Cargo", String(100)),
)

_bloqueo_roles = Table(
    "bloqueo_roles",
    _metadata,
    Column("Id_Bloqueo_Rol", Integer, primary_key=True, autoincrement=True),
    Column("Rol", String(2), nullable=False, unique=True),
    Column("Timestamp_Desbloqueo", BigInteger, nullable=False, server_default="0"),
    Column("Bloqueo_Total", Boolean, nullable=False, server_default="1"),
)

# Columns the login path needs. Celular and Cargo are never loaded there.
_LOGIN_COLUMNS = (
    _personal.c["DNI_Personal_Administrativo"],
    _personal.c["Nombre_Usuario"],
    _personal.c["Contraseña"],
    _personal.c["Nombres"],
    _personal.c["Apellidos"],
    _personal.c["Google_Drive_Foto_ID"],
    _personal.c["Genero"],
    _personal.c["Estado"],
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class StaffStore:
    """Repository for PersonalAdministrativo and RoleBlock entities.

    Usage:
        store = StaffStore("sqlite:///./stafflogin.db")
        personal = store.get_by_username("jperez")
        block = store.get_active_role_block("PA")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Staff queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> PersonalAdministrativo | None:
        """Look up a staff account by exact username (case-sensitive).

        Only the columns needed to authenticate and build the login response
        are selected. Returns None if not found.
        """
        with self.engine.connect() as conn:
            row = conn.execute(select(*_LOGIN_COLUMNS).where(_personal.c["Nombre_Usuario"] == username)).fetchone()
        return _row_to_personal(row) if row is not None else None

    def create_personal(self, personal: PersonalAdministrativo) -> str:
        """Insert a staff account and return its DNI.

        Raises sqlalchemy.exc.IntegrityError if the DNI or username already exists.
        """
        with self.engine.connect() as conn:
            conn.execute(
                _personal.insert().values(
                    {
                        "DNI_Personal_Administrativo": personal.dni,
                        "Nombre_Usuario": personal.nombre_usuario,
                        "Contraseña": personal.hashed_password,
                        "Nombres": personal.nombres,
                        "Apellidos": personal.apellidos,
                        "Genero": personal.genero,
                        "Estado": personal.estado,
                        "Google_Drive_Foto_ID": personal.google_drive_foto_id,
                        "Celular": personal.celular,
                        "Cargo": personal.cargo,
                    }
                )
            )
            conn.commit()
        return personal.dni

    def set_active(self, dni: str, active: bool) -> bool:
        """Enable or disable an account. Returns False if the DNI is unknown."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _personal.update().where(_personal.c["DNI_Personal_Administrativo"] == dni).values(Estado=active)
            )
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Role blocks
    # ------------------------------------------------------------------

    def get_active_role_block(self, rol: str) -> RoleBlock | None:
        """Return the active (Bloqueo_Total) block for a role, or None."""
        active = (_bloqueo_roles.c.Rol == rol) & (_bloqueo_roles.c.Bloqueo_Total.is_(True))
        with self.engine.connect() as conn:
            row = conn.execute(_bloqueo_roles.select().where(active)).fetchone()
        return _row_to_role_block(row) if row is not None else None

    def set_role_block(self, rol: str, timestamp_desbloqueo: int) -> None:
        """Block a role until the given unix timestamp (0 = no end date).

        One row per role: an existing row is re-activated with the new timestamp.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _bloqueo_roles.update()
                .where(_bloqueo_roles.c.Rol == rol)
                .values(Timestamp_Desbloqueo=timestamp_desbloqueo, Bloqueo_Total=True)
            )
            if result.rowcount == 0:
                conn.execute(
                    _bloqueo_roles.insert().values(
                        Rol=rol,
                        Timestamp_Desbloqueo=timestamp_desbloqueo,
                        Bloqueo_Total=True,
                    )
                )
            conn.commit()

    def clear_role_block(self, rol: str) -> bool:
        """Lift a role block. Returns True if an active block was cleared."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _bloqueo_roles.update()
                .where((_bloqueo_roles.c.Rol == rol) & (_bloqueo_roles.c.Bloqueo_Total.is_(True)))
                .values(Bloqueo_Total=False)
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_personal(row) -> PersonalAdministrativo:
    m = row._mapping
    return PersonalAdministrativo(
        dni=m[_personal.c["DNI_Personal_Administrativo"]],
        nombre_usuario=m[_personal.c["Nombre_Usuario"]],
        hashed_password=m[_personal.c["Contraseña"]],
        nombres=m[_personal.c["Nombres"]],
        apellidos=m[_personal.c["Apellidos"]],
        genero=m[_personal.c["Genero"]],
        estado=bool(m[_personal.c["Estado"]]),
        google_drive_foto_id=m[_personal.c["Google_Drive_Foto_ID"]],
    )


def _row_to_role_block(row) -> RoleBlock:
    return RoleBlock(
        id=row.Id_Bloqueo_Rol,
        rol=row.Rol,
        timestamp_desbloqueo=int(row.Timestamp_Desbloqueo),
        bloqueo_total=bool(row.Bloqueo_Total),
    )
