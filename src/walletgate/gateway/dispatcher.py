"""Dynamic dispatch: callables synthesized from route entries.

Forwarded operations (the EVM RPC methods) have no hand-written client
code. Each route declares its parameter names; the first one is the chain
slot, the rest are filled positionally from ``CallArgs.extra_args``. The
backend answers with a ``{"result": ...}`` envelope.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from walletgate.errors import ArgumentCountError
from walletgate.gateway.context import GatewayContext
from walletgate.gateway.routes import RouteEntry

logger = logging.getLogger(__name__)

# Forwarded to the backend's node proxy
EVM_RPC_METHODS = (
    "eth_getTransactionCount",
    "eth_blockNumber",
    "eth_call",
    "eth_estimateGas",
)


@dataclass(frozen=True)
class CallArgs:
    """Arguments of a dispatched call: the chain plus the declared parameters."""

    chain_id: Any
    extra_args: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "extra_args", tuple(self.extra_args))


Dispatch = Callable[[CallArgs], Awaitable[Any]]


def build_request(operation: str, route: RouteEntry, call: CallArgs) -> dict[str, Any]:
    """Map call arguments onto the route's parameter names.

    Raises:
        ArgumentCountError: if fewer arguments than declared parameters
    """
    names = route.bound_param_names
    if len(call.extra_args) < len(names):
        raise ArgumentCountError(operation, list(names), len(call.extra_args))
    if len(call.extra_args) > len(names):
        logger.debug(
            f"{operation}: ignoring {len(call.extra_args) - len(names)} surplus argument(s)"
        )
    payload = dict(zip(names, call.extra_args))
    payload["chain_id"] = call.chain_id
    return payload


def unwrap_result(body: Any) -> Any:
    """Return the envelope's ``result``, or None when there is none."""
    if isinstance(body, Mapping):
        return body.get("result")
    return None


def bind_route(operation: str, route: RouteEntry, context: GatewayContext) -> Dispatch:
    """Create the callable for one route.

    The route is captured at bind time; the transport is looked up on each
    call so a host change applies to already-bound callables.
    """

    async def dispatch(call: CallArgs) -> Any:
        payload = build_request(operation, route, call)
        body = await context.transport.send(route, payload)
        return unwrap_result(body)

    dispatch.__name__ = operation
    dispatch.__qualname__ = f"dispatch[{operation}]"
    return dispatch


def mount(operations: Iterable[str], context: GatewayContext) -> dict[str, Dispatch]:
    """Bind every named operation.

    Raises:
        UnknownOperationError: if any name is missing from the route table;
            nothing is returned in that case
    """
    mounted: dict[str, Dispatch] = {}
    for operation in operations:
        mounted[operation] = bind_route(operation, context.route(operation), context)
    logger.debug(f"Mounted {len(mounted)} dispatched operation(s)")
    return mounted
