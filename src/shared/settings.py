"""Application settings read from the environment at startup."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from payments.gateway.settings import GatewaySettings


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    return float(raw) if raw else default


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    database_url: str = "sqlite:///storefront.db"
    # Upper bound for a single catalog query, enforced by the database driver
    query_timeout: float = 5.0
    charge_timeout: float = 30.0
    persist_attempts: int = 3
    log_dir: str = "logs"
    gateway: GatewaySettings = field(default_factory=GatewaySettings)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        environ = os.environ if environ is None else environ
        return cls(
            environment=(environ.get("ENVIRONMENT") or "development").lower(),
            database_url=environ.get("DATABASE_URL", "sqlite:///storefront.db"),
            query_timeout=_float(environ, "DATABASE_QUERY_TIMEOUT_SECONDS", 5.0),
            charge_timeout=_float(environ, "CHECKOUT_CHARGE_TIMEOUT_SECONDS", 30.0),
            persist_attempts=_int(environ, "CHECKOUT_PERSIST_ATTEMPTS", 3),
            log_dir=environ.get("LOG_DIR", "logs"),
            gateway=GatewaySettings.from_env(environ),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
