"""Unit tests for core/lockout.py -- role block evaluation.

Covers:
- permanent when unlock is 0, negative, equal to now, or in the past
- remaining time split into hours and leftover minutes (hours not folded into days)
- unlock date rendered in the requested timezone
- string timestamps from BIGINT drivers are coerced
- timestamps outside the datetime range keep the block without a date
"""

import pytest

from core.lockout import block_message, build_block_details, format_remaining, format_unlock_date, is_permanent

# 2026-01-01T00:00:00Z
NEW_YEAR_2026 = 1767225600


@pytest.mark.parametrize(
    "unlock, now, expected",
    [
        (0, 1_000, True),
        (-5, 1_000, True),
        (1_000, 1_000, True),
        (999, 1_000, True),
        (1_001, 1_000, False),
    ],
)
def test_is_permanent(unlock, now, expected):
    assert is_permanent(unlock, now) is expected


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (59, "0h 0m"),
        (60, "0h 1m"),
        (3_599, "0h 59m"),
        (3_600, "1h 0m"),
        (26 * 3600 + 5 * 60 + 42, "26h 5m"),
    ],
)
def test_format_remaining(seconds, expected):
    assert format_remaining(seconds) == expected


def test_format_unlock_date_utc():
    assert format_unlock_date(NEW_YEAR_2026, "UTC") == "01/01/2026, 00:00"


def test_format_unlock_date_uses_timezone():
    """Lima is UTC-5 year-round, so midnight UTC is 19:00 the previous day."""
    assert format_unlock_date(NEW_YEAR_2026, "America/Lima") == "31/12/2025, 19:00"


def test_temporary_block_details():
    now = NEW_YEAR_2026 - (3 * 3600 + 15 * 60 + 59)
    details = build_block_details(NEW_YEAR_2026, now, "UTC")
    assert details.esBloqueoPermanente is False
    assert details.tiempoActualUTC == now
    assert details.timestampDesbloqueoUTC == NEW_YEAR_2026
    assert details.tiempoRestante == "3h 15m"
    assert details.fechaDesbloqueo == "01/01/2026, 00:00"
    assert block_message(details) == "El acceso para personal administrativo está temporalmente bloqueado"


def test_zero_timestamp_is_permanent():
    details = build_block_details(0, NEW_YEAR_2026, "UTC")
    assert details.esBloqueoPermanente is True
    assert details.tiempoRestante == "Permanente"
    assert details.fechaDesbloqueo == "No definida"
    assert block_message(details) == "El acceso para personal administrativo está permanentemente bloqueado"


def test_past_timestamp_is_permanent_and_reported_as_is():
    details = build_block_details(NEW_YEAR_2026 - 10, NEW_YEAR_2026, "UTC")
    assert details.esBloqueoPermanente is True
    assert details.timestampDesbloqueoUTC == NEW_YEAR_2026 - 10
    assert details.tiempoRestante == "Permanente"


def test_string_timestamp_is_coerced():
    details = build_block_details(str(NEW_YEAR_2026), NEW_YEAR_2026 - 120, "UTC")
    assert details.timestampDesbloqueoUTC == NEW_YEAR_2026
    assert details.tiempoRestante == "0h 2m"


@pytest.mark.parametrize("unlock", [1_900_000_000_000, 10**20])
def test_unrepresentable_timestamp_has_no_date(unlock):
    assert format_unlock_date(unlock, "UTC") == "No definida"


def test_millisecond_timestamp_still_evaluates():
    details = build_block_details(1_900_000_000_000, NEW_YEAR_2026, "America/Lima")
    assert details.esBloqueoPermanente is False
    assert details.fechaDesbloqueo == "No definida"
    assert details.tiempoRestante.endswith("m")
