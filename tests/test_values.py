from decimal import Decimal

import pytest

from burnmeter.models import TokenCounts
from burnmeter.values import BurnRate, BurnRateTier, ContextUsage, Cost, RemainingTime


class TestCost:
    def test_defaults_to_zero(self) -> "None":
        assert Cost().amount == Decimal(0)

    def test_converts_floats_through_str(self) -> "None":
        assert Cost(0.1).amount == Decimal("0.1")

    def test_rejects_negative(self) -> "None":
        with pytest.raises(ValueError):
            Cost(Decimal("-0.01"))

    def test_addition_and_total(self) -> "None":
        assert Cost(Decimal("0.02")) + Cost(Decimal("0.03")) == Cost(Decimal("0.05"))
        assert Cost.total([Cost(Decimal("0.1"))] * 3) == Cost(Decimal("0.3"))
        assert Cost.total([]) == Cost()

    def test_ordering(self) -> "None":
        assert Cost(Decimal("1")) < Cost(Decimal("2"))


class TestBurnRate:
    @pytest.mark.parametrize(
        "tokens_per_minute, tier",
        [
            (0.0, BurnRateTier.NORMAL),
            (1999.9, BurnRateTier.NORMAL),
            (2000.0, BurnRateTier.MODERATE),
            (4999.0, BurnRateTier.MODERATE),
            (5000.0, BurnRateTier.HIGH),
        ],
    )
    def test_tier(self, tokens_per_minute: "float", tier: "BurnRateTier") -> "None":
        rate = BurnRate(cost_per_hour=Decimal("1"), tokens_per_minute=tokens_per_minute)
        assert rate.tier is tier

    def test_rejects_negative(self) -> "None":
        with pytest.raises(ValueError):
            BurnRate(cost_per_hour=Decimal("-1"), tokens_per_minute=0.0)


class TestRemainingTime:
    def test_expired(self) -> "None":
        assert RemainingTime.expired().is_expired
        assert not RemainingTime(1).is_expired

    @pytest.mark.parametrize("minutes", [0, -3])
    def test_rejects_non_positive_minutes(self, minutes: "int") -> "None":
        with pytest.raises(ValueError):
            RemainingTime(minutes)


class TestContextUsage:
    def test_rejects_invalid(self) -> "None":
        with pytest.raises(ValueError):
            ContextUsage(token_count=-1, percentage=0, window_size=100)
        with pytest.raises(ValueError):
            ContextUsage(token_count=1, percentage=1, window_size=0)


class TestTokenCounts:
    def test_rejects_negative(self) -> "None":
        with pytest.raises(ValueError, match="cache_read"):
            TokenCounts(cache_read=-1)

    def test_non_cache_total(self) -> "None":
        tokens = TokenCounts(input=10, cache_creation=100, cache_read=1000)
        assert tokens.non_cache_total == 10
