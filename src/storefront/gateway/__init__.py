"""Gateway adapter registry: picks the persistence gateway for a config.

Uses the in-process LocalGateway by default; the HttpGateway is selected
with ``STOREFRONT_GATEWAY=http``.
"""

from storefront.config import GATEWAY_HTTP, GATEWAY_LOCAL, StoreConfig
from storefront.gateway.port import PersistenceGateway


def build_gateway(config: StoreConfig, domain=None) -> PersistenceGateway:
    """Return a new gateway adapter for ``config``.

    Args:
        config: store configuration; ``config.gateway`` names the adapter.
        domain: an initialized backend domain for the local adapter. When
            omitted the bundled backend domain is initialized and used.
    """
    if config.gateway == GATEWAY_LOCAL:
        from storefront.gateway.local import LocalGateway

        if domain is None:
            from backend.domain import backend

            backend.init()
            domain = backend
        return LocalGateway(domain)

    if config.gateway == GATEWAY_HTTP:
        from storefront.gateway.http import HttpGateway

        return HttpGateway(config.api_url, timeout=config.request_timeout)

    raise ValueError(f"Unknown gateway type: {config.gateway}")
