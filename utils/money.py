from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

def parse_money(value: str) -> Decimal:
    """
    Parse an amount typed by a user, e.g. ``"1 250,50 €"`` or ``"$1,250.50"``.

    A lone comma is read as the decimal separator. With both separators
    present, whichever comes last is the decimal one (``"1.250,50"`` and
    ``"1,250.50"`` are both 1250.50).
    """
    if value is None:
        raise ValueError("missing money value")

    normalized = value.strip()
    if not normalized:
        raise ValueError("empty money value")

    is_negative = normalized.startswith("(") and normalized.endswith(")")
    normalized = normalized.replace("$", "").replace("€", "").replace(" ", "").replace("\u00a0", "")

    if is_negative:
        normalized = normalized[1:-1]

    if "," in normalized and "." in normalized:
        if normalized.rfind(",") > normalized.rfind("."):
            normalized = normalized.replace(".", "").replace(",", ".")
        else:
            normalized = normalized.replace(",", "")
    else:
        normalized = normalized.replace(",", ".")

    try:
        amount = Decimal(normalized).quantize(
            Decimal("0.01"),
            rounding=ROUND_HALF_UP
        )
    except InvalidOperation as exc:
        raise ValueError("invalid money value") from exc

    return -amount if is_negative else amount
