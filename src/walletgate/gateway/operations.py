"""Typed backend operations.

Each operation resolves its route by a well-known key at call time, so a
refreshed route table or a new host takes effect immediately. Request and
response shapes are specific to each operation, which is why they are
written out here instead of going through the dispatcher.

Addresses are always sent lower-cased.
"""

import logging
from typing import Any, Optional, Union

from walletgate.gateway.context import GatewayContext
from walletgate.risk.contracts import (
    ChainInfo,
    GasLevel,
    PendingTxCount,
    TextExplanation,
    TotalBalance,
    TransactionExplanation,
    TransactionRequest,
)
from walletgate.risk.decision import SecurityCheckResult

logger = logging.getLogger(__name__)

TxLike = Union[TransactionRequest, dict[str, Any]]


def normalize_address(address: str) -> str:
    """Lower-case an address so the backend sees one spelling per account."""
    return address.strip().lower()


def _tx_payload(tx: TxLike) -> dict[str, Any]:
    if isinstance(tx, TransactionRequest):
        return tx.to_wire()
    return TransactionRequest.model_validate(tx).to_wire()


class WalletOperations:
    """Hand-written operations over the route table."""

    def __init__(self, context: GatewayContext):
        self.context = context

    async def _call(self, operation: str, payload: Optional[dict[str, Any]] = None) -> Any:
        route = self.context.route(operation)
        return await self.context.transport.send(route, payload)

    # ======================
    # Chains and balances
    # ======================

    async def get_supported_chains(self) -> list[ChainInfo]:
        data = await self._call("get_supported_chains")
        return [ChainInfo.model_validate(chain) for chain in data or []]

    async def get_recommend_chains(self, address: str, origin: str) -> list[ChainInfo]:
        """Chains suggested for a dapp origin, highest priority first."""
        data = await self._call(
            "recommend_chains",
            {"user_addr": normalize_address(address), "origin": origin},
        )
        return [ChainInfo.model_validate(chain) for chain in data or []]

    async def get_total_balance(self, address: str) -> TotalBalance:
        data = await self._call("get_total_balance", {"id": normalize_address(address)})
        return TotalBalance.model_validate(data)

    async def get_pending_count(self, address: str) -> PendingTxCount:
        data = await self._call(
            "get_pending_tx_count", {"user_addr": normalize_address(address)}
        )
        return PendingTxCount.model_validate(data)

    # ======================
    # Security checks
    # ======================

    async def check_origin(self, address: str, origin: str) -> SecurityCheckResult:
        """Reputation check run before a dapp is allowed to connect."""
        data = await self._call(
            "check_origin",
            {"user_addr": normalize_address(address), "origin": origin},
        )
        result = SecurityCheckResult.model_validate(data)
        logger.info(f"Origin check for {origin}: {result.decision.value}")
        return result

    async def check_text(self, address: str, origin: str, text: str) -> SecurityCheckResult:
        """Risk check for a personal-sign / typed-data request."""
        data = await self._call(
            "check_text",
            {"user_addr": normalize_address(address), "origin": origin, "text": text},
        )
        return SecurityCheckResult.model_validate(data)

    async def check_tx(
        self,
        tx: TxLike,
        origin: str,
        address: str,
        update_nonce: bool = False,
    ) -> SecurityCheckResult:
        data = await self._call(
            "check_tx",
            {
                "user_addr": normalize_address(address),
                "origin": origin,
                "tx": _tx_payload(tx),
                "update_nonce": update_nonce,
            },
        )
        result = SecurityCheckResult.model_validate(data)
        logger.info(f"Transaction check for {origin}: {result.decision.value}")
        return result

    # ======================
    # Explanations
    # ======================

    async def explain_tx(
        self,
        tx: TxLike,
        origin: str,
        address: str,
        update_nonce: bool = False,
    ) -> TransactionExplanation:
        """Simulate a transaction before it is signed.

        A failed simulation is returned like any other explanation, with
        ``simulation.succeeded`` false and the simulator's error message.
        """
        data = await self._call(
            "explain_tx",
            {
                "tx": _tx_payload(tx),
                "user_addr": normalize_address(address),
                "origin": origin,
                "update_nonce": update_nonce,
            },
        )
        explanation = TransactionExplanation.model_validate(data)
        if not explanation.simulation.succeeded:
            logger.info(
                f"Pre-execution failed for {origin}: {explanation.simulation.error_message}"
            )
        return explanation

    async def explain_text(self, origin: str, address: str, text: str) -> TextExplanation:
        data = await self._call(
            "explain_text",
            {"user_addr": normalize_address(address), "origin": origin, "text": text},
        )
        return TextExplanation.model_validate(data)

    async def explain_origin(
        self, origin: str, title: str = "", return_logo: bool = False
    ) -> dict[str, Any]:
        """Backend description of a dapp origin, passed through unparsed."""
        data = await self._call(
            "explain_origin",
            {"origin": origin, "title": title, "return_logo": return_logo},
        )
        return data or {}

    # ======================
    # Gas and broadcast
    # ======================

    async def gas_market(
        self, chain_id: str, custom_price: Optional[int] = None
    ) -> list[GasLevel]:
        """Gas price tiers for a chain, in the backend's order."""
        data = await self._call(
            "gas_market", {"chain_id": chain_id, "custom_price": custom_price}
        )
        return [GasLevel.model_validate(level) for level in data or []]

    async def push_tx(self, tx: TxLike) -> Any:
        """Broadcast a signed transaction; returns the backend's identifier."""
        data = await self._call("push_tx", {"tx": _tx_payload(tx)})
        logger.info("Transaction pushed to backend")
        return data
