from decimal import Decimal
from typing import Mapping

from burnmeter.models import PricingRecord, TokenCounts, UsageRecord
from burnmeter.values import Cost

OPUS_MODEL = "claude-opus-4-1-20250805"
SONNET_MODEL = "claude-sonnet-4-20250514"

_OPUS_PRICING = PricingRecord(
    input_cost_per_token=Decimal("0.000015"),
    output_cost_per_token=Decimal("0.000075"),
    cache_creation_input_token_cost=Decimal("0.00001875"),
    cache_read_input_token_cost=Decimal("0.0000015"),
)
_SONNET_PRICING = PricingRecord(
    input_cost_per_token=Decimal("0.000003"),
    output_cost_per_token=Decimal("0.000015"),
    cache_creation_input_token_cost=Decimal("0.00000375"),
    cache_read_input_token_cost=Decimal("0.0000003"),
)

# iteration order matters: substring matching takes the first hit
PRICING_TABLE: "Mapping[str, PricingRecord]" = {
    OPUS_MODEL: _OPUS_PRICING,
    SONNET_MODEL: _SONNET_PRICING,
    "claude-3-opus-20240229": _OPUS_PRICING,
    "claude-3.5-sonnet-20241022": _SONNET_PRICING,
}


def resolve_pricing(
    model_name: "str | None",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "PricingRecord | None":
    """
    resolves pricing for a model name:
     - exact match on the table key.
     - case-sensitive substring match in either direction,
     first key in table order wins.
     - family fallback: names containing "opus" or "sonnet"
     (any case) get the Opus or Sonnet record.
    Returns None when nothing matches.
    """
    if not model_name:
        return None

    pricing = table.get(model_name)
    if pricing is not None:
        return pricing

    for key, pricing in table.items():
        if key in model_name or model_name in key:
            return pricing

    lowered = model_name.lower()
    if "opus" in lowered:
        return table.get(OPUS_MODEL)
    if "sonnet" in lowered:
        return table.get(SONNET_MODEL)
    return None


def token_cost(tokens: "TokenCounts", pricing: "PricingRecord") -> "Decimal":
    """
    sums count * rate over the four token categories. A missing
    count or a missing rate contributes nothing to the total.
    """
    pairs = (
        (tokens.input, pricing.input_cost_per_token),
        (tokens.output, pricing.output_cost_per_token),
        (tokens.cache_creation, pricing.cache_creation_input_token_cost),
        (tokens.cache_read, pricing.cache_read_input_token_cost),
    )
    total = Decimal(0)
    for count, rate in pairs:
        if count is not None and rate is not None:
            total += count * rate
    return total


def record_cost(
    record: "UsageRecord",
    table: "Mapping[str, PricingRecord]" = PRICING_TABLE,
) -> "Cost":
    """
    returns the cost a record contributes: its precomputed cost when
    present, otherwise the token cost under the resolved pricing,
    otherwise zero.
    """
    if record.precomputed_cost is not None:
        return Cost(record.precomputed_cost)

    if record.token_counts is None:
        return Cost()

    pricing = resolve_pricing(record.model_name, table)
    if pricing is None:
        return Cost()
    return Cost(token_cost(record.token_counts, pricing))
