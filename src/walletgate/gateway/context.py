"""Explicit context shared by the dispatcher and the typed operations."""

from dataclasses import dataclass

from walletgate.errors import UnknownOperationError
from walletgate.gateway.config_store import ConfigStore
from walletgate.gateway.routes import RouteEntry, RouteTable
from walletgate.gateway.transport import RateLimitedTransport


@dataclass
class GatewayContext:
    """Where operations find their host, routes and transport.

    Host and routes are read through the config store on every access.
    The transport attribute is replaced when the host changes.
    """

    config: ConfigStore
    transport: RateLimitedTransport

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def routes(self) -> RouteTable:
        return self.config.routes

    def route(self, operation: str) -> RouteEntry:
        """Look up one operation, failing if the table does not declare it."""
        try:
            return self.routes[operation]
        except KeyError:
            raise UnknownOperationError(operation) from None
