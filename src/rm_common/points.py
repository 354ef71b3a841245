"""Integer arithmetic utilities for the points economy.

Balances, stakes and payouts are int points. Odds are Decimal with two
fractional digits; payouts are truncated towards zero (floor for the
non-negative values used here). Never use float for money math.
"""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation

MIN_ODDS = Decimal("1.00")
# odds column is NUMERIC(8, 2)
MAX_ODDS = Decimal("999999.99")
_ODDS_QUANTUM = Decimal("0.01")


def parse_odds(value: object) -> Decimal:
    """Normalise odds input to a two-digit Decimal. Raises ValueError if unusable."""
    try:
        odds = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Odds must be a number, got {value!r}") from e
    if not odds.is_finite():
        raise ValueError(f"Odds must be finite, got {value!r}")
    try:
        return odds.quantize(_ODDS_QUANTUM, rounding=ROUND_FLOOR)
    except InvalidOperation as e:
        raise ValueError(f"Odds out of range, got {value!r}") from e


def calculate_payout(amount: int, odds: Decimal) -> int:
    """payout = floor(amount * odds). 100 @ 2.5 -> 250, 33 @ 1.55 -> 51."""
    return int((Decimal(amount) * odds).to_integral_value(rounding=ROUND_FLOOR))


def format_points(points: int) -> str:
    """German thousands separator: 1150 -> '1.150', -25000 -> '-25.000'."""
    return f"{points:,}".replace(",", ".")
