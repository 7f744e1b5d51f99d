from typing import Iterable, Optional

INVOICE_PREFIX = "INV-"
INVOICE_WIDTH = 3

PAYMENT_PREFIX = "PYN-"
PAYMENT_WIDTH = 4

BALANCE_PREFIX = "BAL-"
BALANCE_WIDTH = 4


def parse_sequence(value: Optional[str], prefix: str) -> Optional[int]:
    """Numeric suffix of `value` when it carries `prefix`, else None."""
    if not value or not value.startswith(prefix):
        return None
    suffix = value[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def format_sequence(number: int, prefix: str, width: int) -> str:
    return f"{prefix}{str(number).zfill(width)}"


def next_number(existing: Iterable[Optional[str]], prefix: str, width: int) -> str:
    """
    Next human-readable document number.

    Takes the highest numeric suffix among values with the given prefix and
    adds one. Values that do not parse are ignored; with nothing to parse the
    sequence starts at 1.

        next_number(["INV-001", "INV-007"], "INV-", 3) -> "INV-008"
        next_number([], "PYN-", 4)                     -> "PYN-0001"
    """
    numbers = [n for n in (parse_sequence(v, prefix) for v in existing) if n is not None]
    highest = max(numbers) if numbers else 0
    return format_sequence(highest + 1, prefix, width)


class DuplicateNumberError(ValueError):
    """A document number that is already taken."""
