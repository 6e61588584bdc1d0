"""Risk decision model shared by the gateway and its consumers."""

from walletgate.risk.contracts import (
    BalanceChange,
    ChainBalance,
    ChainInfo,
    ChainPendingCount,
    GasEstimate,
    GasLevel,
    PendingTxCount,
    Simulation,
    TextExplanation,
    TokenInfo,
    TotalBalance,
    TransactionExplanation,
    TransactionRequest,
    TxClassification,
)
from walletgate.risk.decision import (
    Alert,
    RiskDecision,
    SecurityCheckResult,
    decision_for_alerts,
)

__all__ = [
    # Decisions
    "RiskDecision",
    "Alert",
    "SecurityCheckResult",
    "decision_for_alerts",
    # Chains and balances
    "ChainInfo",
    "ChainBalance",
    "ChainPendingCount",
    "TotalBalance",
    "PendingTxCount",
    # Transactions
    "TransactionRequest",
    "TxClassification",
    "GasEstimate",
    "TokenInfo",
    "BalanceChange",
    "Simulation",
    "TransactionExplanation",
    "TextExplanation",
    "GasLevel",
]
