"""Core application utilities."""

from .config import Settings, get_settings
from .database import (
    async_session_factory,
    close_db,
    create_session_factory,
    engine,
    engine_options,
    get_session_factory,
    init_db,
    run_in_transaction,
)
from .dependencies import SessionFactoryDep, SettingsDep

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "engine",
    "engine_options",
    "async_session_factory",
    "create_session_factory",
    "get_session_factory",
    "run_in_transaction",
    "init_db",
    "close_db",
    # Dependencies
    "SessionFactoryDep",
    "SettingsDep",
]
