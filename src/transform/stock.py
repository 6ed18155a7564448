# src/transform/stock.py

"""Stock quantity parsing and the two quantity display policies."""

import math
from enum import Enum
from typing import Any


class StockPolicy(str, Enum):
    """How the output quantity is derived from the raw stock fields.

    ``SUM`` adds the external-warehouse bucket to the base stock.
    ``CAP`` shows base stock only, replaced by ``"<cap>+"`` at the cap.
    """

    SUM = "sum"
    CAP = "cap"


def parse_quantity(value: Any) -> int:
    """Parse a stock count such as ``12``, ``"12"`` or ``"200+"``.

    A trailing ``+`` is stripped. Anything non-numeric yields 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip().rstrip("+").strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def external_quantity(
    entries: list[dict[str, Any]],
    warehouse_code: str,
) -> int:
    """Stock held at *warehouse_code*, or 0 when no entry matches."""
    for entry in entries:
        if str(entry.get("warehouseCode", "")).strip() == warehouse_code:
            return parse_quantity(entry.get("stock"))
    return 0


def quantity_text(
    base: int,
    external: int,
    policy: StockPolicy,
    cap: int = 200,
) -> str:
    """Render the output quantity under *policy*."""
    if policy is StockPolicy.CAP:
        return f"{cap}+" if base >= cap else str(base)
    return str(base + external)
