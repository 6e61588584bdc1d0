"""Route table: how each backend operation is reached.

Routes are described by the backend itself through the discovery endpoint.
The bundled template below is what a fresh install starts from and what
stays in use whenever discovery fails.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from walletgate.errors import RouteDiscoveryError

DISCOVERY_PATH = "/v1/wallet/config"

# Methods whose parameters travel in the query string
READ_METHODS = frozenset({"get", "head", "delete", "options"})


@dataclass(frozen=True)
class RouteEntry:
    """Declarative description of one backend operation.

    The first name in ``param_names`` is the chain slot; the remaining
    names are bound, in order, to the caller's extra arguments.
    """

    path: str
    http_method: str = "get"
    param_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_read(self) -> bool:
        return self.http_method in READ_METHODS

    @property
    def bound_param_names(self) -> tuple[str, ...]:
        """Parameter names filled from extra arguments (chain slot excluded)."""
        return self.param_names[1:]

    @classmethod
    def from_wire(cls, name: str, raw: Any) -> "RouteEntry":
        """Build an entry from a ``{path, method, params?}`` object."""
        if not isinstance(raw, Mapping):
            raise RouteDiscoveryError(f"Route '{name}' is not an object")
        path = raw.get("path")
        method = raw.get("method")
        params = raw.get("params") or []
        if not isinstance(path, str) or not path:
            raise RouteDiscoveryError(f"Route '{name}' has no path")
        if not isinstance(method, str) or not method:
            raise RouteDiscoveryError(f"Route '{name}' has no method")
        if not isinstance(params, list) or not all(isinstance(p, str) for p in params):
            raise RouteDiscoveryError(f"Route '{name}' has invalid params")
        return cls(path=path, http_method=method.lower(), param_names=tuple(params))

    def to_wire(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "method": self.http_method,
            "params": list(self.param_names),
        }


class RouteTable(Mapping[str, RouteEntry]):
    """Immutable mapping of operation name to route.

    A table is never edited in place; refreshing builds a new table and
    swaps the reference.
    """

    def __init__(self, entries: Optional[Mapping[str, RouteEntry]] = None):
        self._entries: dict[str, RouteEntry] = dict(entries or {})

    def __getitem__(self, name: str) -> RouteEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RouteTable({sorted(self._entries)})"

    @classmethod
    def from_wire(cls, raw: Any) -> "RouteTable":
        """Parse a discovery payload, rejecting it as a whole on any bad entry."""
        if not isinstance(raw, Mapping):
            raise RouteDiscoveryError(
                f"Route table must be an object, got {type(raw).__name__}"
            )
        if not raw:
            raise RouteDiscoveryError("Route table is empty")
        return cls({name: RouteEntry.from_wire(name, value) for name, value in raw.items()})

    def to_wire(self) -> dict[str, dict[str, Any]]:
        return {name: entry.to_wire() for name, entry in self._entries.items()}


# Bundled template. Chains come back ordered by priority, highest first,
# and carry community_id, the client-side standard chain id.
DEFAULT_ROUTES: dict[str, dict[str, Any]] = {
    "get_supported_chains": {
        "path": "/v1/wallet/supported_chains",
        "method": "get",
        "params": [],
    },
    "get_total_balance": {
        "path": "/v1/user/total_balance",
        "method": "get",
        "params": ["id"],
    },
    "get_pending_tx_count": {
        "path": "/v1/wallet/pending_tx_count",
        "method": "get",
        "params": ["id"],
    },
    "recommend_chains": {
        "path": "/v1/wallet/recommend_chains",
        "method": "get",
        "params": ["origin", "id"],
    },
    "check_origin": {
        "path": "/v1/wallet/security/check_origin",
        "method": "get",
        "params": [],
    },
    "explain_origin": {
        "path": "/v1/wallet/explain_origin",
        "method": "get",
        "params": ["origin", "title", "return_logo"],
    },
    # Text signing
    "explain_text": {
        "path": "/v1/wallet/api/explain_text",
        "method": "get",
        "params": ["origin", "text", "user_addr"],
    },
    "check_text": {
        "path": "/v1/wallet/check_text",
        "method": "post",
        "params": ["origin", "text", "user_addr"],
    },
    # Transaction signing: call description, pre-execution result,
    # gas cost and timing, token balance changes
    "explain_tx": {
        "path": "/v1/wallet/explain_tx",
        "method": "post",
        "params": [],
    },
    "check_tx": {
        "path": "/v1/wallet/check_tx",
        "method": "post",
        "params": [],
    },
    "gas_market": {
        "path": "/v1/wallet/gas_market",
        "method": "get",
        "params": ["chainId", "custom_price"],
    },
    "push_tx": {
        "path": "/v1/wallet/push_tx",
        "method": "post",
        "params": [],
    },
}


def default_route_table() -> RouteTable:
    return RouteTable.from_wire(DEFAULT_ROUTES)
