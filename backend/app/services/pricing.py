"""Service fee estimates shown by the site's pricing calculator."""
from decimal import ROUND_HALF_UP, Decimal

CONTINGENCY_FEE_RATE = Decimal("0.15")
CONTRACT_HOURLY_RATE = 85
COACHING_SESSION_RATE = 125

SALARY_RANGE = (30_000, 300_000)
CONTRACT_HOURS_RANGE = (120, 500)

# Package size -> discount
COACHING_PACKAGES = {
    1: Decimal("0"),
    3: Decimal("0.05"),
    5: Decimal("0.10"),
    10: Decimal("0.15"),
}

DESCRIPTIONS = {
    "contingency": (
        "Based on 15% of the hired candidate's first-year base compensation. "
        "You only pay when we successfully place a candidate."
    ),
    "contract": "Based on $85/hour for project-based consulting work. Minimum commitment of 120 hours.",
    "coaching": "Career coaching and resume services at $125 per 60-minute session. Package discounts available.",
}


class PricingError(ValueError):
    pass


def _whole_dollars(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise PricingError(f"{name} must be between {low:,} and {high:,}")


def estimate_contingency(annual_salary: int) -> int:
    _check_range("Annual salary", annual_salary, SALARY_RANGE)
    return _whole_dollars(Decimal(annual_salary) * CONTINGENCY_FEE_RATE)


def estimate_contract(hours: int) -> int:
    _check_range("Contract hours", hours, CONTRACT_HOURS_RANGE)
    return hours * CONTRACT_HOURLY_RATE


def estimate_coaching(sessions: int) -> int:
    if sessions not in COACHING_PACKAGES:
        packages = ", ".join(str(n) for n in COACHING_PACKAGES)
        raise PricingError(f"Coaching is sold in packages of {packages} sessions")
    gross = Decimal(sessions * COACHING_SESSION_RATE)
    return _whole_dollars(gross * (1 - COACHING_PACKAGES[sessions]))


def format_usd(amount: int) -> str:
    return f"${amount:,}"


def estimate(service_type: str, annual_salary: int = 100_000, contract_hours: int = 120, coaching_sessions: int = 1) -> dict:
    """Estimate the fee for one service type."""
    if service_type == "contingency":
        amount = estimate_contingency(annual_salary)
    elif service_type == "contract":
        amount = estimate_contract(contract_hours)
    elif service_type == "coaching":
        amount = estimate_coaching(coaching_sessions)
    else:
        raise PricingError(f"Unknown service type: {service_type}")
    return {
        "service_type": service_type,
        "amount": amount,
        "formatted": format_usd(amount),
        "description": DESCRIPTIONS[service_type],
    }
