from haype.utils.sequence import (
    INVOICE_PREFIX,
    INVOICE_WIDTH,
    PAYMENT_PREFIX,
    PAYMENT_WIDTH,
    next_number,
    parse_sequence,
)


def test_next_invoice_number_follows_highest_existing():
    existing = [f"INV-{n:03d}" for n in range(1, 8)]
    assert next_number(existing, INVOICE_PREFIX, INVOICE_WIDTH) == "INV-008"


def test_first_numbers_start_at_one():
    assert next_number([], INVOICE_PREFIX, INVOICE_WIDTH) == "INV-001"
    assert next_number([], PAYMENT_PREFIX, PAYMENT_WIDTH) == "PYN-0001"


def test_gaps_and_order_do_not_matter():
    assert next_number(["INV-007", "INV-001"], INVOICE_PREFIX, INVOICE_WIDTH) == "INV-008"


def test_unparsable_and_foreign_values_are_ignored():
    existing = ["INV-002", "INV-abc", "BAL-0040", "", None, "inv-009"]
    assert next_number(existing, INVOICE_PREFIX, INVOICE_WIDTH) == "INV-003"


def test_number_grows_past_width():
    assert next_number(["INV-999"], INVOICE_PREFIX, INVOICE_WIDTH) == "INV-1000"


def test_parse_sequence():
    assert parse_sequence("PYN-0042", PAYMENT_PREFIX) == 42
    assert parse_sequence("PYN-", PAYMENT_PREFIX) is None
    assert parse_sequence("INV-001", PAYMENT_PREFIX) is None
