# src/models/raw_item.py

"""Read-only accessors over one catalog entry as returned by the API."""

from typing import Any

_CATEGORY_LEVELS = (1, 2, 3, 4)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class RawItem:
    """Loosely-typed wrapper around a raw catalog JSON object.

    Every accessor returns a usable default when the field is missing
    or has an unexpected shape, so normalisation never has to guess.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any) -> None:
        self._data: dict[str, Any] = _as_dict(data)

    @property
    def raw(self) -> dict[str, Any]:
        return self._data

    @property
    def product(self) -> dict[str, Any]:
        return _as_dict(self._data.get("product"))

    @property
    def price(self) -> dict[str, Any]:
        return _as_dict(self._data.get("price"))

    @property
    def stock_entries(self) -> list[dict[str, Any]]:
        """Per-location stock entries; non-dict entries are skipped."""
        entries = self._data.get("stocks")
        if not isinstance(entries, list):
            return []
        return [e for e in entries if isinstance(e, dict)]

    def category_code(self, level: int) -> Any:
        self._check_level(level)
        return self._data.get(f"categoryLevel{level}")

    def category_name(self, level: int) -> Any:
        self._check_level(level)
        return self._data.get(f"categoryLevel{level}Name")

    @staticmethod
    def _check_level(level: int) -> None:
        if level not in _CATEGORY_LEVELS:
            msg = f"Category level must be one of {_CATEGORY_LEVELS}, got {level}"
            raise ValueError(msg)
