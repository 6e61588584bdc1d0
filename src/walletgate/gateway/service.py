"""Gateway service: startup sequence, host changes and route discovery.

Startup loads (or seeds) the persisted config, builds the rate-limited
transport for the configured host, refreshes the route table from the
backend and mounts the forwarded RPC methods. Discovery is best-effort:
if it fails the previous table, at worst the bundled template, stays in
use. A discovered table that cannot be persisted counts as a failed
discovery. Failing to load the config record itself still propagates.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from walletgate.config import Settings, get_settings
from walletgate.errors import PersistenceError, RouteDiscoveryError, UnknownOperationError
from walletgate.gateway.config_store import ConfigStore
from walletgate.gateway.context import GatewayContext
from walletgate.gateway.dispatcher import EVM_RPC_METHODS, CallArgs, Dispatch, mount
from walletgate.gateway.operations import WalletOperations
from walletgate.gateway.routes import DISCOVERY_PATH, RouteEntry, RouteTable
from walletgate.gateway.transport import RateLimitedTransport, RateLimiter
from walletgate.store.base import PersistBackend
from walletgate.store.sql import SqlBackend

logger = logging.getLogger(__name__)

DISCOVERY_ROUTE = RouteEntry(path=DISCOVERY_PATH, http_method="get")


class Gateway:
    """Entry point for everything the wallet asks of the backend.

    Example:
        async with Gateway(MemoryBackend()) as gateway:
            result = await gateway.operations.check_origin(address, origin)
    """

    def __init__(
        self,
        backend: Optional[PersistBackend] = None,
        settings: Optional[Settings] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the gateway.

        Args:
            backend: Persistence for the config record (SQL database by default)
            settings: Application settings (cached settings by default)
            http_transport: httpx transport for the backend client, used to
                stub the network in tests
        """
        self.settings = settings or get_settings()
        self.config = ConfigStore(
            backend or SqlBackend(),
            namespace=self.settings.persist_namespace,
            default_host=self.settings.openapi_host,
        )
        self._http_transport = http_transport
        # Shared by every transport so a draining one still counts toward the limit
        self._limiter = RateLimiter(max_calls=self.settings.max_requests_per_second)
        self._context: Optional[GatewayContext] = None
        self._operations: Optional[WalletOperations] = None
        self._rpc: dict[str, Dispatch] = {}
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "Gateway":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # ======================
    # Lifecycle
    # ======================

    @property
    def context(self) -> GatewayContext:
        if self._context is None:
            raise RuntimeError("Gateway used before init()")
        return self._context

    @property
    def operations(self) -> WalletOperations:
        if self._operations is None:
            raise RuntimeError("Gateway used before init()")
        return self._operations

    @property
    def rpc(self) -> dict[str, Dispatch]:
        """Mounted forwarded operations by name."""
        return dict(self._rpc)

    async def init(self) -> None:
        """Load config, build the transport and discover routes.

        Discovery failures are logged and never raised from here.
        """
        async with self._lock:
            await self.config.load()
            await self._rebuild_transport()
            await self._refresh_routes()
        logger.info(
            f"Gateway ready: host={self.config.host}, routes={len(self.config.routes)}, "
            f"rpc={len(self._rpc)}"
        )

    async def close(self) -> None:
        if self._context is not None:
            await self._context.transport.aclose()

    def get_host(self) -> str:
        return self.config.get_host()

    async def set_host(self, host: str) -> None:
        """Switch backend host, rebuild the transport and refresh routes once."""
        async with self._lock:
            await self.config.set_host(host)
            await self._rebuild_transport()
            await self._refresh_routes()

    async def refresh(self) -> bool:
        """Reload the route table from the backend.

        Returns:
            True if the table was replaced, False if the old one was kept
        """
        async with self._lock:
            return await self._refresh_routes()

    async def _rebuild_transport(self) -> None:
        transport = RateLimitedTransport(
            self.config.host,
            max_requests_per_second=self.settings.max_requests_per_second,
            timeout=self.settings.request_timeout,
            transport=self._http_transport,
            limiter=self._limiter,
        )
        if self._context is None:
            self._context = GatewayContext(config=self.config, transport=transport)
            self._operations = WalletOperations(self._context)
            return

        previous = self._context.transport
        self._context.transport = transport
        await previous.retire()

    async def _refresh_routes(self) -> bool:
        host = self.config.host
        refreshed = False
        try:
            data = await self.context.transport.send(DISCOVERY_ROUTE)
            table = RouteTable.from_wire(data)
            await self.config.replace_routes(table)
            refreshed = True
            logger.info(f"Loaded {len(table)} routes from {host}")
        except (
            httpx.HTTPError, ValueError, RouteDiscoveryError, PersistenceError
        ) as e:
            logger.warning(
                f"Route discovery against {host} failed, keeping "
                f"{len(self.config.routes)} existing routes: {e}"
            )
        self._mount_rpc()
        return refreshed

    def _mount_rpc(self) -> None:
        try:
            self._rpc = mount(EVM_RPC_METHODS, self.context)
        except UnknownOperationError as e:
            logger.warning(f"RPC forwarding unavailable: {e}")
            self._rpc = {}

    # ======================
    # Forwarded RPC
    # ======================

    async def call_rpc(self, method: str, chain_id: Any, *args: Any) -> Any:
        """Call a mounted forwarded operation by name."""
        try:
            dispatch = self._rpc[method]
        except KeyError:
            raise UnknownOperationError(method) from None
        return await dispatch(CallArgs(chain_id=chain_id, extra_args=args))

    async def eth_call(self, chain_id: Any, params: list[Any]) -> Any:
        return await self.call_rpc("eth_call", chain_id, *params)

    async def eth_get_transaction_count(self, chain_id: Any, params: list[Any]) -> Any:
        return await self.call_rpc("eth_getTransactionCount", chain_id, *params)

    async def eth_block_number(self, chain_id: Any) -> Any:
        return await self.call_rpc("eth_blockNumber", chain_id)

    async def eth_estimate_gas(self, chain_id: Any, params: list[Any]) -> Any:
        return await self.call_rpc("eth_estimateGas", chain_id, *params)
