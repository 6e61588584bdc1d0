"""Exceptions raised by the gateway.

Transport failures are not wrapped: callers receive the ``httpx``
exception raised by the client unchanged.
"""

import httpx


class GatewayError(Exception):
    """Base class for gateway errors."""

    pass


class UnknownOperationError(GatewayError, KeyError):
    """Raised when an operation name has no entry in the route table."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No route configured for operation '{operation}'")

    def __str__(self) -> str:
        return self.args[0]


class ArgumentCountError(GatewayError, TypeError):
    """Raised when a dispatched call gets fewer arguments than its route declares."""

    def __init__(self, operation: str, expected: list[str], received: int):
        self.operation = operation
        self.expected = expected
        self.received = received
        super().__init__(
            f"{operation} expects {len(expected)} argument(s) {expected}, got {received}"
        )


class RouteDiscoveryError(GatewayError):
    """Raised when the discovery endpoint returns an unusable route table."""

    pass


class ConfigVersionError(GatewayError):
    """Raised when a persisted config record has an unsupported version."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(f"Unsupported config record version: {version!r}")


class PersistenceError(GatewayError):
    """Raised when a persistence backend fails to load or save a record."""

    def __init__(self, namespace: str, reason: str):
        self.namespace = namespace
        super().__init__(f"Persistence failed for '{namespace}': {reason}")


def is_service_unavailable(exc: BaseException) -> bool:
    """Check whether an error should surface as "service unavailable".

    Only transport and discovery failures qualify. Risk findings and failed
    simulations arrive as data and never reach this check.
    """
    return isinstance(exc, (httpx.HTTPError, RouteDiscoveryError))
