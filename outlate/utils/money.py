"""
Integer-cents money helpers.

Amounts inside the engine are plain ``int`` counts of minor units. Addition,
subtraction and scalar multiplication are ordinary integer operations;
division goes through :func:`distribute` so that no cent is ever lost or
invented.
"""
from decimal import Decimal, ROUND_HALF_UP

Money = int

CENTS_PER_UNIT = 100


def to_cents(value) -> Money:
    """
    Quantize a major-unit amount (e.g. ``Decimal("18.35")``, ``"18.35"``, ``18.35``)
    to integer cents. Floats go through ``str`` first so ``0.1`` becomes 10, not 9.
    """
    if isinstance(value, float):
        value = str(value)
    amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(amount * CENTS_PER_UNIT)


def format_cents(cents: Money, symbol: str = "$") -> str:
    sign = "-" if cents < 0 else ""
    units, rest = divmod(abs(cents), CENTS_PER_UNIT)
    return f"{sign}{symbol}{units:,}.{rest:02d}"


def distribute(amount: Money, weights: dict[str, int]) -> dict[str, Money]:
    """
    Split amount proportionally to weights so the parts sum EXACTLY to amount.

    Every recipient first gets the floor of ``amount * weight / total_weight``.
    The cents still missing are handed out one at a time to the recipients with
    the largest fractional remainder; equal remainders go to the smaller id first.

    Args:
        amount: Non-negative number of cents to split.
        weights: Recipient id -> non-negative integer weight. At least one weight
            must be positive.

    Returns:
        Dictionary mapping recipient id to cents, in the same order as weights.
    """
    if amount < 0:
        raise ValueError(f"Cannot distribute a negative amount ({amount})")
    if any(w < 0 for w in weights.values()):
        raise ValueError("Distribution weights must be non-negative")
    total_weight = sum(weights.values())
    if total_weight <= 0:
        raise ValueError("Cannot distribute over zero recipients")

    quotients = {}
    remainders = {}
    for rid, weight in weights.items():
        quotients[rid], remainders[rid] = divmod(amount * weight, total_weight)

    shortfall = amount - sum(quotients.values())
    by_remainder = sorted(weights, key=lambda rid: (-remainders[rid], rid))
    for rid in by_remainder[:shortfall]:
        quotients[rid] += 1

    return quotients


def split_evenly(amount: Money, recipient_ids: list[str]) -> dict[str, Money]:
    """
    Equal split. Each recipient gets ``amount // n`` or one cent more; the extra
    cents go to the smallest ids. Repeated ids count once.
    """
    unique_ids = list(dict.fromkeys(recipient_ids))
    return distribute(amount, {rid: 1 for rid in unique_ids})
