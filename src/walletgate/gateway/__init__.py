"""Dynamic routing and dispatch toward the risk/analysis backend."""

from walletgate.gateway.config_store import CONFIG_VERSION, ConfigRecord, ConfigStore
from walletgate.gateway.context import GatewayContext
from walletgate.gateway.dispatcher import (
    EVM_RPC_METHODS,
    CallArgs,
    bind_route,
    build_request,
    mount,
)
from walletgate.gateway.operations import WalletOperations, normalize_address
from walletgate.gateway.routes import (
    DEFAULT_ROUTES,
    DISCOVERY_PATH,
    RouteEntry,
    RouteTable,
    default_route_table,
)
from walletgate.gateway.service import Gateway
from walletgate.gateway.transport import RateLimitedTransport, RateLimiter

__all__ = [
    # Config
    "CONFIG_VERSION",
    "ConfigRecord",
    "ConfigStore",
    # Routes
    "DEFAULT_ROUTES",
    "DISCOVERY_PATH",
    "RouteEntry",
    "RouteTable",
    "default_route_table",
    # Transport
    "RateLimiter",
    "RateLimitedTransport",
    # Dispatch
    "EVM_RPC_METHODS",
    "CallArgs",
    "bind_route",
    "build_request",
    "mount",
    # Operations
    "GatewayContext",
    "WalletOperations",
    "normalize_address",
    "Gateway",
]
