import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

# thresholds of the token-rate indicator, in tokens per minute
_MODERATE_TOKENS_PER_MINUTE = 2000
_HIGH_TOKENS_PER_MINUTE = 5000


@dataclass(frozen=True, slots=True, order=True)
class Cost:
    """
    Cost is a non-negative USD amount. Arithmetic stays in
    Decimal so that summing many small per-token costs is exact.
    """

    amount: "Decimal" = Decimal(0)

    def __post_init__(self) -> "None":
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("cost must be non-negative")

    def __add__(self, other: "Cost") -> "Cost":
        if not isinstance(other, Cost):
            return NotImplemented
        return Cost(self.amount + other.amount)

    @classmethod
    def total(cls, costs: "Iterable[Cost]") -> "Cost":
        return cls(sum((c.amount for c in costs), Decimal(0)))


class BurnRateTier(enum.Enum):
    NORMAL = "normal"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class BurnRate:
    """
    BurnRate is the projected cost accrual of a block per hour,
    together with the coarser token-rate indicator used for tiering.
    """

    cost_per_hour: "Decimal"
    # input + output tokens only, cache tokens excluded
    tokens_per_minute: "float"

    def __post_init__(self) -> "None":
        if self.cost_per_hour < 0 or self.tokens_per_minute < 0:
            raise ValueError("burn rate must be non-negative")

    @property
    def tier(self) -> "BurnRateTier":
        if self.tokens_per_minute < _MODERATE_TOKENS_PER_MINUTE:
            return BurnRateTier.NORMAL
        if self.tokens_per_minute < _HIGH_TOKENS_PER_MINUTE:
            return BurnRateTier.MODERATE
        return BurnRateTier.HIGH


@dataclass(frozen=True, slots=True)
class RemainingTime:
    """
    RemainingTime is the number of whole minutes left in a block's
    window. An expired window carries minutes=None rather than a
    zero or negative count.
    """

    minutes: "int | None"

    def __post_init__(self) -> "None":
        if self.minutes is not None and self.minutes <= 0:
            raise ValueError("remaining minutes must be positive; use expired()")

    @classmethod
    def expired(cls) -> "RemainingTime":
        return cls(minutes=None)

    @property
    def is_expired(self) -> "bool":
        return self.minutes is None


@dataclass(frozen=True, slots=True)
class ContextUsage:
    token_count: "int"
    percentage: "int"
    window_size: "int"

    def __post_init__(self) -> "None":
        if self.token_count < 0 or self.percentage < 0:
            raise ValueError("context usage must be non-negative")
        if self.window_size <= 0:
            raise ValueError("context window size must be positive")
