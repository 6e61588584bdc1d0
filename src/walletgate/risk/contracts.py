"""Response and request contracts for the typed backend operations.

Field names follow Python conventions; aliases carry the backend's wire
names so payloads validate directly and requests serialize with
``model_dump(by_alias=True)``.
"""

import logging
from enum import IntEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

FAILED_SIMULATION_MESSAGE = "Pre-execution failed"


class _Contract(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ======================
# Chains and balances
# ======================


class ChainInfo(_Contract):
    """A chain supported by the backend."""

    id: str = Field(..., description="Backend chain identifier (eth, bsc, ...)")
    community_id: int = Field(..., description="EVM chain ID, the client-side standard id")
    name: str = Field(..., description="Chain display name")
    native_token_id: str = Field(default="", description="Native token identifier")
    logo_url: str = Field(default="", description="Chain logo")
    wrapped_token_id: str = Field(default="", description="Wrapped native token identifier")
    symbol: str = Field(default="", description="Native token symbol")


class ChainBalance(ChainInfo):
    usd_value: float = Field(default=0.0, description="Balance on this chain in USD")


class ChainPendingCount(ChainInfo):
    pending_tx_count: int = Field(default=0, description="Pending transactions on this chain")


class TotalBalance(_Contract):
    """Balance across all chains for one address."""

    total_usd_value: float = Field(default=0.0, description="Sum over all chains in USD")
    chains: list[ChainBalance] = Field(default_factory=list, alias="chain_list")


class PendingTxCount(_Contract):
    """Pending transaction counts for one address."""

    total_count: int = Field(default=0)
    chains: list[ChainPendingCount] = Field(default_factory=list)


# ======================
# Transactions
# ======================


HexOrInt = Union[int, str]


class TransactionRequest(_Contract):
    """An EVM transaction as the wallet is about to sign or has signed it.

    Only the common fields are declared. Anything else the caller sets
    (``maxFeePerGas``, ``type``, ``accessList``, ...) is kept as is, and
    serialization sends exactly the fields that were set, so the backend
    sees the transaction the user signs.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    chain_id: HexOrInt = Field(..., alias="chainId", description="EVM chain ID")
    from_address: str = Field(..., alias="from", description="Sender address")
    to: Optional[str] = Field(None, description="Recipient or contract address")
    value: HexOrInt = Field(default="0x0", description="Value in wei")
    data: str = Field(default="0x", description="Call data (hex)")
    gas: Optional[HexOrInt] = Field(None, description="Gas limit")
    gas_price: Optional[HexOrInt] = Field(None, alias="gasPrice", description="Gas price in wei")
    nonce: Optional[HexOrInt] = Field(None, description="Nonce")
    r: Optional[str] = Field(None, description="Signature r, once signed")
    s: Optional[str] = Field(None, description="Signature s, once signed")
    v: Optional[HexOrInt] = Field(None, description="Signature v, once signed")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with backend field names, only the fields that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class TxClassification(IntEnum):
    """Transaction type inferred by the simulator."""

    UNKNOWN = 0
    SEND = 1
    APPROVE = 2
    CANCEL_APPROVE = 3
    CANCEL_TX = 4
    SIGN_TX = 5


class GasEstimate(_Contract):
    estimated_gas_cost_usd_value: float = 0.0
    estimated_gas_cost_value: float = 0.0
    estimated_gas_used: int = 0
    estimated_seconds: int = 0
    front_tx_count: int = 0
    max_gas_cost_usd_value: float = 0.0
    max_gas_cost_value: float = 0.0


class TokenInfo(_Contract):
    """Token metadata as priced by the backend."""

    id: str
    chain: str
    name: str = ""
    symbol: str = ""
    display_symbol: Optional[str] = None
    optimized_symbol: str = ""
    decimals: int = 18
    logo_url: str = ""
    price: float = 0.0
    is_verified: bool = False
    is_core: bool = False
    is_wallet: bool = False
    time_at: float = 0


class BalanceChange(TokenInfo):
    """Predicted change of one token balance after the transaction."""

    amount: float = Field(..., description="Signed amount, negative when sent")


class Simulation(_Contract):
    """Pre-execution (dry run) result of a transaction.

    A failed simulation is a normal response. It never carries balance
    changes and always carries an error message.
    """

    balance_changes: list[BalanceChange] = Field(default_factory=list, alias="assets_change")
    error_message: str = Field(default="", alias="err_msg")
    succeeded: bool = Field(..., alias="success")
    classified_type: TxClassification = Field(
        default=TxClassification.UNKNOWN, alias="tx_type"
    )

    @field_validator("classified_type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> Any:
        if value is None:
            return TxClassification.UNKNOWN
        try:
            return TxClassification(int(value))
        except (TypeError, ValueError):
            logger.debug(f"Unknown transaction type from simulator: {value!r}")
            return TxClassification.UNKNOWN

    @model_validator(mode="after")
    def _failed_has_no_changes(self) -> "Simulation":
        if not self.succeeded:
            if self.balance_changes:
                logger.warning("Dropping balance changes reported by a failed simulation")
                self.balance_changes = []
            if not self.error_message:
                self.error_message = FAILED_SIMULATION_MESSAGE
        return self


class TransactionExplanation(_Contract):
    """Everything the wallet shows before the user signs a transaction."""

    gas_estimate: GasEstimate = Field(..., alias="gas")
    native_token: TokenInfo
    simulation: Simulation = Field(..., alias="pre_exec")
    tags: list[str] = Field(default_factory=list)
    transaction: TransactionRequest = Field(..., alias="tx")


class TextExplanation(_Contract):
    comment: str = Field(default="", description="What signing this text means")


# ======================
# Gas
# ======================


class GasLevel(_Contract):
    """One tier of the gas market (slow, normal, fast, custom)."""

    level: str
    price: float
    front_tx_count: int = 0
    estimated_seconds: int = 0
