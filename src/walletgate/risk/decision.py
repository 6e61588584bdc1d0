"""Risk decisions returned by the security check operations.

The backend classifies an origin, a text to sign or a transaction and
returns one decision plus three alert buckets. The decision the caller
receives always matches the most severe non-empty bucket, so the UI can
render it as-is.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class RiskDecision(str, Enum):
    """Backend risk classification."""

    PASS = "pass"
    WARNING = "warning"
    DANGER = "danger"
    FORBIDDEN = "forbidden"
    LOADING = "loading"  # Check still running
    PENDING = "pending"  # Check not started yet

    @property
    def is_final(self) -> bool:
        """Whether this is a verdict rather than a transient state."""
        return self in _SEVERITY

    @property
    def severity(self) -> Optional[int]:
        """Rank of a final decision, None for transient states."""
        return _SEVERITY.get(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskDecision):
            return NotImplemented
        if not (self.is_final and other.is_final):
            raise TypeError("Transient risk decisions have no severity order")
        return _SEVERITY[self] < _SEVERITY[other]

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskDecision):
            return NotImplemented
        return self == other or self < other

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskDecision):
            return NotImplemented
        return other < self

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskDecision):
            return NotImplemented
        return self == other or other < self


_SEVERITY = {
    RiskDecision.PASS: 0,
    RiskDecision.WARNING: 1,
    RiskDecision.DANGER: 2,
    RiskDecision.FORBIDDEN: 3,
}


class Alert(BaseModel):
    """A single finding inside an alert bucket."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="Backend rule identifier")
    message: str = Field(..., alias="alert", description="Human-readable finding")


def decision_for_alerts(
    warning_alerts: list[Alert],
    danger_alerts: list[Alert],
    forbidden_alerts: list[Alert],
) -> RiskDecision:
    """Return the decision implied by the alert buckets."""
    if forbidden_alerts:
        return RiskDecision.FORBIDDEN
    if danger_alerts:
        return RiskDecision.DANGER
    if warning_alerts:
        return RiskDecision.WARNING
    return RiskDecision.PASS


class SecurityCheckResult(BaseModel):
    """Outcome of an origin, text or transaction security check."""

    model_config = ConfigDict(populate_by_name=True)

    decision: RiskDecision = Field(..., description="Overall verdict")
    alert: str = Field(default="", description="Summary message")
    warning_alerts: list[Alert] = Field(default_factory=list, alias="warning_list")
    danger_alerts: list[Alert] = Field(default_factory=list, alias="danger_list")
    forbidden_alerts: list[Alert] = Field(default_factory=list, alias="forbidden_list")

    @model_validator(mode="after")
    def _align_decision(self) -> "SecurityCheckResult":
        if not self.decision.is_final:
            return self
        implied = decision_for_alerts(
            self.warning_alerts, self.danger_alerts, self.forbidden_alerts
        )
        if implied < self.decision:
            # Downgrade: the backend's summary alert is kept for inspection
            logger.error(
                f"Backend decision '{self.decision.value}' does not match alerts, "
                f"lowering to '{implied.value}' (alert: {self.alert!r})"
            )
            self.decision = implied
        elif implied != self.decision:
            logger.warning(
                f"Backend decision '{self.decision.value}' does not match alerts, "
                f"using '{implied.value}'"
            )
            self.decision = implied
        return self

    @property
    def alerts(self) -> list[Alert]:
        """All alerts, most severe first."""
        return [*self.forbidden_alerts, *self.danger_alerts, *self.warning_alerts]

    @property
    def passed(self) -> bool:
        return self.decision == RiskDecision.PASS
