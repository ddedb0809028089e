from decimal import ROUND_HALF_UP, Decimal

from burnmeter.snapshot import AggregateSnapshot
from burnmeter.values import Cost, RemainingTime

_CENT = Decimal("0.01")


def format_currency(amount: "Decimal") -> "str":
    # amounts below half a cent render as $0.00, never -$0.00
    cents = abs(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    if amount < 0 and cents:
        return f"-${cents}"
    return f"${cents}"


def format_number(n: "int") -> "str":
    return f"{n:,}"


def format_remaining_time(remaining: "RemainingTime") -> "str":
    if remaining.is_expired:
        return "expired"
    hours, minutes = divmod(remaining.minutes, 60)
    if not hours:
        return f"{minutes}m left"
    if not minutes:
        return f"{hours}h left"
    return f"{hours}h {minutes}m left"


def _cost(cost: "Cost") -> "str":
    return format_currency(cost.amount)


def format_snapshot(snapshot: "AggregateSnapshot") -> "str":
    """
    renders a snapshot as one plain status line, e.g.
    "⏰ 2h 15m left 💰 $1.20 today, $0.45 session, $0.90 block"
    " 🔥 $0.30/hr (normal) ⚖️ 108,000 (54%)"
    """
    parts: "list[str]" = []

    block = snapshot.active_block
    if block is not None and not block.remaining.is_expired:
        parts.append(f"⏰ {format_remaining_time(block.remaining)}")

    session = "N/A" if snapshot.session_total is None else _cost(snapshot.session_total)
    summary = f"💰 {_cost(snapshot.today_total)} today, {session} session, "
    if block is None:
        summary += "No active block"
    else:
        summary += f"{_cost(block.total_cost)} block"
        rate = block.burn_rate
        if rate is not None:
            cost_per_hour = format_currency(rate.cost_per_hour)
            summary += f" 🔥 {cost_per_hour}/hr ({rate.tier.value})"
    parts.append(summary)

    context = snapshot.context_usage
    if context is not None:
        parts.append(
            f"⚖️ {format_number(context.token_count)} ({context.percentage}%)"
        )

    return " ".join(parts)
