from decimal import Decimal, InvalidOperation

from aptos_nft_market.utils.errors import ValidationError

# 1 APT = 10^8 octas
OCTAS_PER_APT = 100_000_000


def truncate_address(address: str, start: int = 6, end: int = 4) -> str:
    if len(address) <= start + end + 3:
        return address
    return f"{address[:start]}...{address[-end:]}"


def octas_to_apt(octas: int) -> float:
    return octas / OCTAS_PER_APT


def apt_to_octas(apt: float) -> int:
    return round(apt * OCTAS_PER_APT)


def parse_apt_amount(text: str, field: str = "amount") -> int:
    """
    Parse a user typed APT amount into octas.

    Decimal parsing keeps values like "0.1" exact. Anything that is not a finite,
    non-negative number raises ValidationError instead of being coerced to zero.
    """
    if text is None or not str(text).strip():
        raise ValidationError(f"The {field} is required.")
    try:
        amount = Decimal(str(text).strip())
    except InvalidOperation:
        raise ValidationError(f"The {field} must be a number: {text!r}")
    if not amount.is_finite():
        raise ValidationError(f"The {field} must be a finite number: {text!r}")
    if amount < 0:
        raise ValidationError(f"The {field} cannot be negative: {text!r}")
    return int((amount * OCTAS_PER_APT).to_integral_value())


def format_apt(apt: float) -> str:
    return f"{apt:.8f}".rstrip("0").rstrip(".") + " APT"
