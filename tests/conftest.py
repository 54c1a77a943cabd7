"""
tests/conftest.py -- Shared test fixtures for StaffLogin integration tests.

This module provides:
  - make_test_store(): creates an isolated named in-memory DB
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - api_client: TestClient plus its seeded StaffStore
  - reset_state (autouse): clears rate-limit counters and role blocks between tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG and ALLOWED_HOSTS must be set before any api/auth/core import so
get_settings() auto-generates SECRET_KEY and TrustedHostMiddleware accepts
the TestClient's "testserver" host.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core import -- get_settings() is cached.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import PersonalAdministrativo
from auth.store import StaffStore
from auth.tokens import hash_password
from core.models import RolesSistema

ACTIVE_USERNAME = "jperez"
ACTIVE_PASSWORD = "clave-segura-123"
ACTIVE_DNI = "12345678"
INACTIVE_USERNAME = "mlopez"
INACTIVE_PASSWORD = "otra-clave-456"
NO_PHOTO_USERNAME = "rquispe"
NO_PHOTO_PASSWORD = "sin-foto-789"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_store(db_suffix: str) -> StaffStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return StaffStore(db_url=f"sqlite:///file:test_staff_{db_suffix}?mode=memory&cache=shared&uri=true")


def seed_staff(store: StaffStore) -> None:
    """Insert one active, one inactive and one photo-less staff account."""
    store.create_personal(
        PersonalAdministrativo(
            dni=ACTIVE_DNI,
            nombre_usuario=ACTIVE_USERNAME,
            hashed_password=hash_password(ACTIVE_PASSWORD),
            nombres="Juan Carlos",
            apellidos="Pérez Soto",
            genero="M",
            google_drive_foto_id="1AbCdEfGhIjK",
            cargo="Secretario",
        )
    )
    store.create_personal(
        PersonalAdministrativo(
            dni="87654321",
            nombre_usuario=INACTIVE_USERNAME,
            hashed_password=hash_password(INACTIVE_PASSWORD),
            nombres="María",
            apellidos="López Ramos",
            genero="F",
            estado=False,
        )
    )
    store.create_personal(
        PersonalAdministrativo(
            dni="11223344",
            nombre_usuario=NO_PHOTO_USERNAME,
            hashed_password=hash_password(NO_PHOTO_PASSWORD),
            nombres="Rosa",
            apellidos="Quispe Mamani",
            genero="F",
        )
    )


def _patch_lifespan(store: StaffStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.staff_store = store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, StaffStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers against an isolated, pre-seeded store.
    Each test module gets its own database.
    """
    store = make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    seed_staff(store)

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store

    store.close()


@pytest.fixture(autouse=True)
def reset_state(request) -> Generator[None, None, None]:
    """Start every test with empty rate-limit counters and no role block."""
    store: StaffStore | None = None
    if "api_client" in request.fixturenames:
        _client, store = request.getfixturevalue("api_client")
    limiter.reset()
    yield
    if store is not None:
        store.clear_role_block(RolesSistema.PersonalAdministrativo.value)
