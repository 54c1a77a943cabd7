"""Unit tests for auth/store.py -- StaffStore queries.

Covers:
- get_by_username() returns the login columns and None for unknown users
- duplicate DNI / username raise IntegrityError
- set_active() toggles Estado and reports unknown DNIs
- role block set / get / clear, per-role isolation, re-blocking an existing row
"""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import PersonalAdministrativo
from auth.store import StaffStore


def _personal(dni="12345678", username="jperez", **overrides) -> PersonalAdministrativo:
    fields = dict(
        dni=dni,
        nombre_usuario=username,
        hashed_password="$2b$12$placeholderhashplaceholderhashplaceholderha",
        nombres="Juan",
        apellidos="Pérez Soto",
        genero="M",
        google_drive_foto_id="drive-id",
        celular="987654321",
        cargo="Secretario",
    )
    fields.update(overrides)
    return PersonalAdministrativo(**fields)


@pytest.fixture
def store():
    s = StaffStore("sqlite:///:memory:")
    yield s
    s.close()


class TestStaff:
    def test_get_by_username(self, store):
        store.create_personal(_personal())
        found = store.get_by_username("jperez")
        assert found is not None
        assert found.dni == "12345678"
        assert found.nombres == "Juan"
        assert found.apellidos == "Pérez Soto"
        assert found.genero == "M"
        assert found.estado is True
        assert found.google_drive_foto_id == "drive-id"
        assert found.hashed_password.startswith("$2b$")

    def test_login_lookup_skips_contact_columns(self, store):
        store.create_personal(_personal())
        found = store.get_by_username("jperez")
        assert found.celular is None
        assert found.cargo is None

    def test_unknown_username(self, store):
        assert store.get_by_username("nadie") is None

    def test_duplicate_username(self, store):
        store.create_personal(_personal())
        with pytest.raises(IntegrityError):
            store.create_personal(_personal(dni="99999999"))

    def test_duplicate_dni(self, store):
        store.create_personal(_personal())
        with pytest.raises(IntegrityError):
            store.create_personal(_personal(username="otro"))

    def test_set_active(self, store):
        store.create_personal(_personal())
        assert store.set_active("12345678", False) is True
        assert store.get_by_username("jperez").estado is False
        assert store.set_active("12345678", True) is True
        assert store.get_by_username("jperez").estado is True

    def test_set_active_unknown_dni(self, store):
        assert store.set_active("00000000", False) is False

    def test_ping(self, store):
        assert store.ping() is True


class TestRoleBlocks:
    def test_no_block_by_default(self, store):
        assert store.get_active_role_block("PA") is None

    def test_set_and_get(self, store):
        store.set_role_block("PA", 1767225600)
        block = store.get_active_role_block("PA")
        assert block is not None
        assert block.rol == "PA"
        assert block.timestamp_desbloqueo == 1767225600
        assert block.bloqueo_total is True

    def test_blocks_are_per_role(self, store):
        store.set_role_block("D", 0)
        assert store.get_active_role_block("PA") is None
        assert store.get_active_role_block("D") is not None

    def test_clear(self, store):
        store.set_role_block("PA", 0)
        assert store.clear_role_block("PA") is True
        assert store.get_active_role_block("PA") is None
        assert store.clear_role_block("PA") is False

    def test_reblock_updates_existing_row(self, store):
        store.set_role_block("PA", 100)
        store.clear_role_block("PA")
        store.set_role_block("PA", 200)
        block = store.get_active_role_block("PA")
        assert block.timestamp_desbloqueo == 200
        with store.engine.connect() as conn:
            count = conn.exec_driver_sql("SELECT COUNT(*) FROM bloqueo_roles").scalar()
        assert count == 1
