"""Store configuration, read from the environment."""

import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo

GATEWAY_LOCAL = "local"
GATEWAY_HTTP = "http"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class StoreConfig:
    gateway: str = GATEWAY_LOCAL
    api_url: str = "http://localhost:8000"
    request_timeout: float = 10.0
    # Whether logging out also empties the cart; the app keeps it by default
    clear_cart_on_logout: bool = False
    # Zone for displayed dates; None is the device's local zone
    timezone: tzinfo | None = None

    @classmethod
    def from_env(cls, environ=None) -> "StoreConfig":
        env = os.environ if environ is None else environ
        gateway = env.get("STOREFRONT_GATEWAY", GATEWAY_LOCAL).lower()
        if gateway not in (GATEWAY_LOCAL, GATEWAY_HTTP):
            raise ValueError(f"Unknown gateway: {gateway}")
        zone_name = env.get("STOREFRONT_TIMEZONE", "").strip()
        return cls(
            gateway=gateway,
            api_url=env.get("STOREFRONT_API_URL", cls.api_url),
            request_timeout=float(env.get("STOREFRONT_REQUEST_TIMEOUT", cls.request_timeout)),
            clear_cart_on_logout=env.get("STOREFRONT_CLEAR_CART_ON_LOGOUT", "false").strip().lower() in _TRUTHY,
            timezone=ZoneInfo(zone_name) if zone_name else None,
        )
