"""Kong entity managers and the gateway state provider built on them."""

from kong_adapter.services.kong.base import BaseEntityManager
from kong_adapter.services.kong.consumer_manager import ConsumerManager
from kong_adapter.services.kong.gateway import KongGateway
from kong_adapter.services.kong.plugin_manager import KongPluginManager
from kong_adapter.services.kong.route_manager import RouteManager
from kong_adapter.services.kong.service_manager import ServiceManager

__all__ = [
    "BaseEntityManager",
    "ConsumerManager",
    "KongGateway",
    "KongPluginManager",
    "RouteManager",
    "ServiceManager",
]
