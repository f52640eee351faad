from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

_DEFAULT_ENV = "development"
_ENV_KEY = "FLASK_ENV"
_VALID_ENVS = {"development", "testing", "staging", "production"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EnvironmentInfo:
    name: str
    source: str
    raw_value: str


class EnvReader:
    def __init__(self, data: Mapping[str, str] | None = None):
        self._data = dict(os.environ if data is None else data)
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def _value(self, key: str) -> str | None:
        value = self._data.get(key)
        if value is None:
            return None
        stripped = value.strip()
        return stripped if stripped else None

    def str(self, key: str, default: str | None = None) -> str | None:
        value = self._value(key)
        return value if value is not None else default

    def int(self, key: str, default: int = 0) -> int:
        value = self._value(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            self.warn(f"{key} expected integer but received {value!r}; falling back to {default}.")
            return default

    def float(self, key: str, default: float = 0.0) -> float:
        value = self._value(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            self.warn(f"{key} expected float but received {value!r}; falling back to {default}.")
            return default

    def bool(self, key: str, default: bool = False) -> bool:
        value = self._value(key)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        self.warn(f"{key} expected boolean but received {value!r}; falling back to {default}.")
        return default

    def raw(self, key: str) -> str | None:
        return self._data.get(key)


def _normalized_env(value: str | None, *, default: str = _DEFAULT_ENV) -> str:
    if not value:
        return default
    return value.strip().lower() or default


def _normalize_db_url(url: str | None) -> str | None:
    if not url:
        return None
    return 'postgresql://' + url[len('postgres://'):] if url.startswith('postgres://') else url


def _resolve_environment(reader: EnvReader) -> EnvironmentInfo:
    raw_value = reader.str(_ENV_KEY, _DEFAULT_ENV) or _DEFAULT_ENV
    normalized = _normalized_env(raw_value)
    if normalized not in _VALID_ENVS:
        raise RuntimeError(
            f"Invalid {_ENV_KEY}={raw_value!r}. Expected one of {sorted(_VALID_ENVS)}."
        )
    return EnvironmentInfo(name=normalized, source=_ENV_KEY, raw_value=raw_value)


env = EnvReader()
ENV_INFO = _resolve_environment(env)


class BaseConfig:
    FLASK_ENV = ENV_INFO.name
    SECRET_KEY = env.str('FLASK_SECRET_KEY', 'devkey-please-change-in-production')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    WTF_CSRF_ENABLED = True

    RATELIMIT_STORAGE_URI = env.str('RATELIMIT_STORAGE_URI', 'memory://') or 'memory://'
    RATELIMIT_ENABLED = env.bool('RATELIMIT_ENABLED', True)
    RATELIMIT_DEFAULT = env.str('RATELIMIT_DEFAULT', '2000 per hour;300 per minute')

    CACHE_TYPE = env.str('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = env.int('CACHE_DEFAULT_TIMEOUT', 120)

    LOG_LEVEL = env.str('LOG_LEVEL', 'WARNING') or 'WARNING'
    LOG_REDACT_PII = env.bool('LOG_REDACT_PII', True)

    # Inventory rules
    PHARMACY_TIMEZONE = env.str('PHARMACY_TIMEZONE', 'UTC') or 'UTC'
    DEFAULT_LOW_STOCK_THRESHOLD = env.int('DEFAULT_LOW_STOCK_THRESHOLD', 10)
    NEARING_EXPIRY_MONTHS = env.int('NEARING_EXPIRY_MONTHS', 3)
    OVERSTOCK_FACTOR = env.int('OVERSTOCK_FACTOR', 3)
    EXPIRED_SUPPRESSES_STOCK_TAGS = env.bool('EXPIRED_SUPPRESSES_STOCK_TAGS', True)
    RECENT_DISTRIBUTION_DAYS = env.int('RECENT_DISTRIBUTION_DAYS', 7)
    ROTATION_FAST_DAYS = env.int('ROTATION_FAST_DAYS', 30)
    ROTATION_SLOW_DAYS = env.int('ROTATION_SLOW_DAYS', 90)
    STOCK_TRANSACTION_MAX_RETRIES = env.int('STOCK_TRANSACTION_MAX_RETRIES', 3)
    SEARCH_RESULT_LIMIT = env.int('SEARCH_RESULT_LIMIT', 5)
    RECENT_DISTRIBUTIONS_LIMIT = env.int('RECENT_DISTRIBUTIONS_LIMIT', 10)
    TOP_DISTRIBUTED_ITEMS = env.int('TOP_DISTRIBUTED_ITEMS', 5)
    DASHBOARD_CACHE_SECONDS = env.int('DASHBOARD_CACHE_SECONDS', 30)

    FEATURE_STOCK_SUGGESTIONS = env.bool('FEATURE_STOCK_SUGGESTIONS', True)
    GOOGLE_AI_API_KEY = env.str('GOOGLE_AI_API_KEY') or env.str('GEMINI_API_KEY')
    GOOGLE_AI_DEFAULT_MODEL = env.str('GOOGLE_AI_DEFAULT_MODEL', 'gemini-1.5-flash') or 'gemini-1.5-flash'
    SUGGESTION_REQUEST_TIMEOUT_SECONDS = env.int('SUGGESTION_REQUEST_TIMEOUT_SECONDS', 30)
    SUGGESTION_RATE_LIMIT = env.str('SUGGESTION_RATE_LIMIT', '20 per minute') or '20 per minute'

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': env.int('SQLALCHEMY_POOL_RECYCLE', 1800),
    }


class DevelopmentConfig(BaseConfig):
    ENV = 'development'
    DEBUG = True
    SESSION_COOKIE_SECURE = False

    _db_url = _normalize_db_url(env.str('DATABASE_URL'))
    if _db_url:
        SQLALCHEMY_DATABASE_URI = _db_url
    else:
        instance_path = os.path.join(os.path.abspath(os.path.dirname(__file__)), '..', 'instance')
        os.makedirs(instance_path, exist_ok=True)
        SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(instance_path, 'pharmastock.db')
    LOG_LEVEL = env.str('LOG_LEVEL', 'DEBUG') or 'DEBUG'


class TestingConfig(BaseConfig):
    ENV = 'testing'
    TESTING = True
    WTF_CSRF_ENABLED = False
    SESSION_COOKIE_SECURE = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }
    RATELIMIT_ENABLED = False
    FEATURE_STOCK_SUGGESTIONS = True


class StagingConfig(BaseConfig):
    ENV = 'staging'
    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = 'https'
    DEBUG = False
    TESTING = False
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(env.str('DATABASE_URL'))
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'max_overflow': 20,
        'pool_pre_ping': True,
        'pool_recycle': 1800,
    }


class ProductionConfig(BaseConfig):
    ENV = 'production'
    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = 'https'
    DEBUG = False
    TESTING = False
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(env.str('DATABASE_URL'))
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': env.int('SQLALCHEMY_POOL_SIZE', 20),
        'max_overflow': env.int('SQLALCHEMY_MAX_OVERFLOW', 10),
        'pool_pre_ping': True,
        'pool_recycle': 1800,
        'pool_timeout': env.int('SQLALCHEMY_POOL_TIMEOUT', 30),
    }
    LOG_LEVEL = env.str('LOG_LEVEL', 'INFO') or 'INFO'


config_map = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'staging': StagingConfig,
    'production': ProductionConfig,
}


def get_active_config_name() -> str:
    return ENV_INFO.name


def get_config():
    return config_map[get_active_config_name()]


Config = config_map[ENV_INFO.name]
ENV_DIAGNOSTICS = {
    'active': ENV_INFO.name,
    'source': ENV_INFO.source,
    'variables': {ENV_INFO.source: ENV_INFO.raw_value},
    'warnings': tuple(env.warnings),
}
