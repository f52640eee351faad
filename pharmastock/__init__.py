import logging
import os
from typing import Any

from flask import Flask
from sqlalchemy.pool import StaticPool

from .blueprints_registry import register_blueprints
from .config import ENV_DIAGNOSTICS
from .error_tools import register_error_handlers
from .extensions import cache, csrf, db, limiter, login_manager, migrate
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    os.makedirs(app.instance_path, exist_ok=True)

    _load_base_config(app, config)
    _apply_sqlalchemy_env_overrides(app)
    _configure_sqlite_engine_options(app)

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    _configure_cache(app)
    _configure_rate_limiter(app)
    login_manager.init_app(app)

    register_blueprints(app)
    from . import models  # noqa: F401  # ensure models registered for Alembic

    configure_logging(app)
    register_error_handlers(app)

    from .management import register_commands

    register_commands(app)
    _run_optional_create_all(app)

    return app


def _load_base_config(app: Flask, config: dict[str, Any] | None) -> None:
    app.config.from_object("pharmastock.config.Config")
    if config:
        app.config.update(config)
    app.config["ENV_DIAGNOSTICS"] = ENV_DIAGNOSTICS
    for warning in ENV_DIAGNOSTICS.get("warnings", ()):
        logger.warning("Environment configuration warning: %s", warning)

    if app.config.get("TESTING"):
        app.config.setdefault("WTF_CSRF_ENABLED", False)

    if config and "DATABASE_URL" in config:
        app.config["SQLALCHEMY_DATABASE_URI"] = config["DATABASE_URL"]


def _apply_sqlalchemy_env_overrides(app: Flask) -> None:
    engine_opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS", {}) or {})
    changed = False

    def _apply_int(env_key: str, option_key: str):
        nonlocal changed
        value = os.environ.get(env_key)
        if value in (None, ""):
            return
        try:
            engine_opts[option_key] = int(value)
            changed = True
        except ValueError:
            logger.warning("Invalid integer for %s: %s", env_key, value)

    _apply_int("SQLALCHEMY_POOL_SIZE", "pool_size")
    _apply_int("SQLALCHEMY_MAX_OVERFLOW", "max_overflow")

    if changed:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_opts


def _configure_sqlite_engine_options(app: Flask) -> None:
    """Configure SQLite engine options for testing/memory databases"""
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "") or ""
    if app.config.get("TESTING") or uri.startswith("sqlite"):
        opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS", {}))
        # Remove pool args that SQLite memory + StaticPool don't accept
        opts.pop("pool_size", None)
        opts.pop("max_overflow", None)
        opts.pop("pool_timeout", None)
        if uri == "sqlite:///:memory:":
            opts["poolclass"] = StaticPool
            opts["connect_args"] = {"check_same_thread": False}
        elif uri.startswith("sqlite"):
            # Concurrent writers wait for the file lock instead of failing at once.
            connect_args = dict(opts.get("connect_args") or {})
            connect_args.setdefault("timeout", 15)
            opts["connect_args"] = connect_args
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


def _configure_cache(app: Flask) -> None:
    cache_config = {
        "CACHE_TYPE": app.config.get("CACHE_TYPE") or "SimpleCache",
        "CACHE_DEFAULT_TIMEOUT": app.config.get("CACHE_DEFAULT_TIMEOUT", 120),
    }
    if app.config.get("TESTING"):
        cache_config["CACHE_TYPE"] = "SimpleCache"
    cache.init_app(app, config=cache_config)
    logger.info("Cache configured (%s)", cache_config["CACHE_TYPE"])


def _configure_rate_limiter(app: Flask) -> None:
    storage_uri = (
        app.config.get("RATELIMIT_STORAGE_URI")
        or app.config.get("RATELIMIT_STORAGE_URL")
        or "memory://"
    )
    app.config["RATELIMIT_STORAGE_URI"] = storage_uri
    limiter.init_app(app)

    if app.config.get("ENV") == "production" and storage_uri.startswith("memory://"):
        logger.warning("Rate limiter uses in-process memory storage; limits are per worker.")


def _run_optional_create_all(app: Flask) -> None:
    def _env_flag(key: str):
        value = os.environ.get(key)
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        return None

    create_all_flag = _env_flag("SQLALCHEMY_CREATE_ALL")
    if create_all_flag is None:
        logger.info("db.create_all() not enabled; Alembic migrations are the source of truth")
        return
    if create_all_flag is False:
        logger.info("db.create_all() disabled via SQLALCHEMY_CREATE_ALL=0")
        return

    logger.info("Local dev: creating tables via db.create_all() (SQLALCHEMY_CREATE_ALL)")
    with app.app_context():
        db.create_all()
        logger.info("Database tables created/verified")
