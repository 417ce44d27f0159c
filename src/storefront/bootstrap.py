"""App startup: build the store, restore the session, hand it to the UI."""

from storefront.config import StoreConfig
from storefront.gateway import build_gateway
from storefront.gateway.port import PersistenceGateway
from storefront.store import Store
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_store(config: StoreConfig | None = None, gateway: PersistenceGateway | None = None) -> Store:
    """Construct a Store; nothing is contacted until ``start()``."""
    config = config or StoreConfig.from_env()
    return Store(gateway or build_gateway(config), config)


async def start_app(config: StoreConfig | None = None, gateway: PersistenceGateway | None = None) -> Store:
    """Configure logging, build the store and restore any existing session."""
    configure_logging()
    store = create_store(config, gateway)
    await store.start()
    logger.info(
        "Storefront started",
        gateway=store.config.gateway,
        user_id=store.state.user.id if store.state.user else None,
    )
    return store
