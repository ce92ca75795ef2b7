from decimal import Decimal

def format_indian_currency(amount: Decimal) -> str:
    """Render an amount with Indian digit grouping, e.g. 1234567.5 -> '₹12,34,567.50'."""
    if amount is None:
        return "₹0.00"
    amount = Decimal(amount)
    sign = "-" if amount < 0 else ""
    amount_str = f"{abs(amount):.2f}"
    integer_part, decimal_part = amount_str.split(".")

    if len(integer_part) <= 3:
        return f"{sign}₹{integer_part}.{decimal_part}"

    last_three = integer_part[-3:]
    remaining = integer_part[:-3]

    formatted_remaining = ""
    while len(remaining) > 2:
        formatted_remaining = "," + remaining[-2:] + formatted_remaining
        remaining = remaining[:-2]

    formatted_remaining = remaining + formatted_remaining

    return f"{sign}₹{formatted_remaining},{last_three}.{decimal_part}"


def format_rate(rate) -> str:
    """Percent rates without trailing zeros: Decimal('10.00') -> '10', Decimal('2.50') -> '2.5'."""
    if rate is None:
        return "0"
    text = f"{Decimal(rate):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
