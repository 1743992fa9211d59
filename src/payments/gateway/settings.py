"""Payment gateway configuration, read from the environment at startup."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from shared.exceptions import ConfigurationError

GATEWAYS = ("fake", "braintree")
BRAINTREE_ENVIRONMENTS = ("sandbox", "production")


@dataclass(frozen=True)
class GatewaySettings:
    gateway: str = "fake"
    environment: str = "sandbox"
    merchant_id: str | None = None
    public_key: str | None = None
    private_key: str | None = None
    timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ

        settings = cls(
            gateway=env.get("PAYMENT_GATEWAY", "fake").lower(),
            environment=env.get("BRAINTREE_ENVIRONMENT", "sandbox").lower(),
            merchant_id=env.get("BRAINTREE_MERCHANT_ID") or None,
            public_key=env.get("BRAINTREE_PUBLIC_KEY") or None,
            private_key=env.get("BRAINTREE_PRIVATE_KEY") or None,
            timeout=float(env.get("PAYMENT_GATEWAY_TIMEOUT_SECONDS", "30")),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.gateway not in GATEWAYS:
            raise ConfigurationError(f"PAYMENT_GATEWAY must be one of {', '.join(GATEWAYS)}, got `{self.gateway}`")
        if self.timeout <= 0:
            raise ConfigurationError("PAYMENT_GATEWAY_TIMEOUT_SECONDS must be positive")
        if self.gateway != "braintree":
            return

        if self.environment not in BRAINTREE_ENVIRONMENTS:
            raise ConfigurationError(
                f"BRAINTREE_ENVIRONMENT must be one of {', '.join(BRAINTREE_ENVIRONMENTS)}, got `{self.environment}`"
            )
        missing = [
            name
            for name, value in (
                ("BRAINTREE_MERCHANT_ID", self.merchant_id),
                ("BRAINTREE_PUBLIC_KEY", self.public_key),
                ("BRAINTREE_PRIVATE_KEY", self.private_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing Braintree credentials: {', '.join(missing)}")
