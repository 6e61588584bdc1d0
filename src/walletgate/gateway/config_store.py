"""Persisted gateway configuration: backend host and route table.

The store is the only owner of the host and the route table. Transport and
operations read through it on every call, so a host change or a refresh is
visible to the next request without handing out copies.

Every mutator saves the whole record before returning.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from walletgate.config import DEFAULT_OPENAPI_HOST
from walletgate.errors import ConfigVersionError, RouteDiscoveryError
from walletgate.gateway.routes import RouteTable, default_route_table
from walletgate.store.base import PersistBackend

logger = logging.getLogger(__name__)

CONFIG_VERSION = 2


@dataclass(frozen=True)
class ConfigRecord:
    """Snapshot of the persisted configuration."""

    host: str
    routes: RouteTable
    version: int = CONFIG_VERSION

    def to_wire(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "host": self.host,
            "routes": self.routes.to_wire(),
        }


def _migrate_v1(raw: dict[str, Any]) -> dict[str, Any]:
    """Version-less records kept routes under ``config``, methods in any case."""
    try:
        routes = RouteTable.from_wire(raw.get("config"))
    except RouteDiscoveryError as e:
        logger.warning(f"Discarding unreadable v1 route table, using template: {e}")
        routes = default_route_table()
    return {
        "version": 2,
        "host": raw.get("host"),
        "routes": routes.to_wire(),
    }


# version -> migration producing the next version
MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _migrate_v1,
}


def migrate_record(raw: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a raw persisted record to the current version."""
    version = raw.get("version", 1)
    if not isinstance(version, int) or version > CONFIG_VERSION or version < 1:
        raise ConfigVersionError(version)
    while version < CONFIG_VERSION:
        logger.info(f"Migrating config record from version {version}")
        raw = MIGRATIONS[version](raw)
        version = raw["version"]
    return raw


class ConfigStore:
    """Loads, seeds and persists the gateway configuration."""

    def __init__(
        self,
        backend: PersistBackend,
        namespace: str = "openapi",
        default_host: str = DEFAULT_OPENAPI_HOST,
    ):
        self.backend = backend
        self.namespace = namespace
        self.default_host = default_host
        self._record: Optional[ConfigRecord] = None

    @property
    def loaded(self) -> bool:
        return self._record is not None

    @property
    def record(self) -> ConfigRecord:
        if self._record is None:
            raise RuntimeError("Config store used before load()")
        return self._record

    @property
    def host(self) -> str:
        return self.record.host

    @property
    def routes(self) -> RouteTable:
        return self.record.routes

    def get_host(self) -> str:
        return self.host

    def template(self) -> ConfigRecord:
        return ConfigRecord(host=self.default_host, routes=default_route_table())

    async def load(self) -> ConfigRecord:
        """Return the persisted record, seeding it from the template if absent."""
        raw = await self.backend.load(self.namespace)
        if raw is None:
            logger.info(f"No persisted config in '{self.namespace}', seeding template")
            await self._commit(self.template())
            return self.record

        migrated = migrate_record(raw)
        repaired = False
        try:
            routes = RouteTable.from_wire(migrated.get("routes"))
        except RouteDiscoveryError as e:
            logger.warning(f"Persisted route table is unreadable, using template: {e}")
            routes = default_route_table()
            repaired = True
        record = ConfigRecord(
            host=migrated.get("host") or self.default_host,
            routes=routes,
            version=migrated["version"],
        )
        if repaired or migrated is not raw:
            await self._commit(record)
        else:
            self._record = record
        logger.debug(f"Loaded config: host={self.host}, {len(self.routes)} routes")
        return self._record

    async def set_host(self, host: str) -> None:
        """Persist a new backend host.

        Rebuilding the transport and refreshing routes is the gateway's
        job; see ``Gateway.set_host``.
        """
        host = host.rstrip("/")
        await self._commit(ConfigRecord(host=host, routes=self.routes))
        logger.info(f"Backend host set to {host}")

    async def replace_routes(self, routes: RouteTable) -> None:
        """Swap in a complete new route table and persist it."""
        await self._commit(ConfigRecord(host=self.host, routes=routes))

    async def _commit(self, record: ConfigRecord) -> None:
        # Persist first: a failed save leaves the in-memory record untouched
        await self.backend.save(self.namespace, record.to_wire())
        self._record = record
