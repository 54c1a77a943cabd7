"""
api/routes/login.py -- Personal Administrativo login endpoint.

Routes:
  GET  /api/login/personal-administrativo  -- route probe
  POST /api/login/personal-administrativo  -- password login; returns a JWT

Check order on POST (each step short-circuits):
  1. Both fields present and non-empty          -> else 400 MISSING_PARAMETERS
  2. Role not blocked by an administrator       -> else 403 ROLE_BLOCKED
  3. Username exists                            -> else 401 INVALID_CREDENTIALS
  4. Account active (Estado)                    -> else 403 USER_INACTIVE
  5. Password matches                           -> else 401 INVALID_CREDENTIALS
  6. Token issued                               -> 200

Security:
  [H2] POST is rate-limited per IP (Settings.login_rate_limit).
  [C1] Unknown usernames still pay for a bcrypt check (verify_personal_password).
  [M5] Cache-Control: no-store on every POST response.

The role block lookup fails open: if the query raises, the error is logged
and login proceeds, so a broken bloqueo_roles table cannot lock every
administrator out.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorResponse, LoginData, LoginRequest, LoginResponse, MessageResponse
from auth.models import RoleBlock
from auth.store import StaffStore
from auth.tokens import create_personal_administrativo_token, verify_personal_password
from core.config import get_settings
from core.lockout import block_message, build_block_details
from core.models import PermissionErrorTypes, RequestErrorTypes, RolesSistema, UserErrorTypes

logger = logging.getLogger("stafflogin.api.login")

_settings = get_settings()

router = APIRouter()

_INVALID_CREDENTIALS = ErrorResponse(
    message="Credenciales inválidas",
    errorType=UserErrorTypes.INVALID_CREDENTIALS.value,
)


def _reply(status_code: int, body: ErrorResponse | LoginResponse) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=not body.success))
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


def _active_block(store: StaffStore) -> RoleBlock | None:
    try:
        return store.get_active_role_block(RolesSistema.PersonalAdministrativo.value)
    except Exception:
        logger.exception("Role block check failed; continuing without it")
        return None


@router.get("/login/personal-administrativo", response_model=MessageResponse)
async def login_info() -> MessageResponse:
    return MessageResponse(message="Login Personal Administrativo")


@router.post("/login/personal-administrativo", response_model=LoginResponse)
@limiter.limit(_settings.login_rate_limit)  # [H2] enforced inside the endpoint wrapper
def login_personal_administrativo(request: Request, body: LoginRequest | None = None) -> JSONResponse:
    """Authenticate a Personal Administrativo account and issue a JWT.

    Unknown usernames and wrong passwords share one message so the response
    does not reveal which usernames exist.
    """
    if body is None or not body.nombre_usuario or not body.contrasena:
        return _reply(
            400,
            ErrorResponse(
                message="El nombre de usuario y la contraseña son obligatorios",
                errorType=RequestErrorTypes.MISSING_PARAMETERS.value,
            ),
        )

    store: StaffStore = request.app.state.staff_store

    block = _active_block(store)
    if block is not None:
        details = build_block_details(block.timestamp_desbloqueo, int(time.time()), _settings.display_timezone)
        logger.warning(
            "Login refused for %r: role blocked (permanent=%s, remaining=%s)",
            body.nombre_usuario,
            details.esBloqueoPermanente,
            details.tiempoRestante,
        )
        return _reply(
            403,
            ErrorResponse(
                message=block_message(details),
                errorType=PermissionErrorTypes.ROLE_BLOCKED.value,
                details=asdict(details),
            ),
        )

    personal = store.get_by_username(body.nombre_usuario)
    if personal is None:
        # [C1] still run bcrypt so timing matches a wrong-password attempt
        verify_personal_password(None, body.contrasena)
        logger.info("Login failed: unknown username %r", body.nombre_usuario)
        return _reply(401, _INVALID_CREDENTIALS)

    if not personal.estado:
        logger.info("Login refused: inactive account %s", personal.dni)
        return _reply(
            403,
            ErrorResponse(
                message="Tu cuenta está inactiva. Contacta al administrador.",
                errorType=UserErrorTypes.USER_INACTIVE.value,
            ),
        )

    if not verify_personal_password(personal, body.contrasena):
        logger.info("Login failed: wrong password for %s", personal.dni)
        return _reply(401, _INVALID_CREDENTIALS)

    token = create_personal_administrativo_token(personal.dni, personal.nombre_usuario)
    logger.info("Login: %s (%s)", personal.nombre_usuario, personal.dni)
    return _reply(
        200,
        LoginResponse(
            message="Inicio de sesión exitoso",
            data=LoginData.from_personal(personal, token),
        ),
    )
