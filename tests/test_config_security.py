from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.database import engine_options


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="change-me")


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="prod", secret_key="change-me-in-production")


def test_debug_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="super-secure-value", debug=True)


def test_custom_secret_key_allowed_in_production() -> None:
    settings = Settings(_env_file=None, app_env="production", secret_key="super-secure-value")
    assert settings.secret_key == "super-secure-value"


def test_business_timezone_must_be_known() -> None:
    settings = Settings(_env_file=None, business_timezone="Europe/Lisbon")
    assert settings.timezone.key == "Europe/Lisbon"

    with pytest.raises(ValidationError):
        Settings(_env_file=None, business_timezone="Mars/Olympus_Mons")


def test_scheduling_tunables_are_bounded() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, max_suggestions=0)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, route_optimization_min_saving_km=-1)


def test_engine_options_bound_lock_waits_and_pin_session_timezone() -> None:
    options = engine_options(Settings(_env_file=None, database_lock_timeout_ms=2500, database_pool_size=3))

    assert options["pool_size"] == 3
    assert options["connect_args"]["server_settings"] == {"timezone": "UTC", "lock_timeout": "2500"}

    unbounded = engine_options(Settings(_env_file=None, database_lock_timeout_ms=0))
    assert "lock_timeout" not in unbounded["connect_args"]["server_settings"]
