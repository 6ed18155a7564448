# src/transform/normalizer.py

"""Map raw catalog items onto the canonical output record."""

import logging
import math
from typing import Any

from src.config.settings import Settings
from src.models.product_record import NormalizedRecord
from src.models.raw_item import RawItem
from src.transform.stock import (
    StockPolicy,
    external_quantity,
    parse_quantity,
    quantity_text,
)

logger = logging.getLogger("catalog_feed.normalizer")

DEFAULT_CURRENCY = "USD"
DIMENSION_UNIT = "cm"


def coerce_text(value: Any, default: str = "") -> str:
    """Turn a JSON scalar into output text; ``None`` and ``""`` → *default*."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return default
    return str(value)


def is_blank(value: Any) -> bool:
    """True for ``None``, ``""``, ``False`` and numeric zero.

    Non-empty strings such as ``"0"`` count as present.
    """
    if value is None or value == "" or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def present_text(value: Any, default: str = "") -> str:
    """Like :func:`coerce_text`, but blank values (zero included) → *default*."""
    if is_blank(value):
        return default
    return coerce_text(value, default)


def format_price(value: Any) -> str:
    """Format a price with two decimals; unusable values → ``""``."""
    if value is None or isinstance(value, bool):
        return ""
    try:
        number = float(str(value).strip())
    except ValueError:
        return ""
    if not math.isfinite(number):
        return ""
    return f"{number:.2f}"


def format_dimension(length: Any, width: Any) -> tuple[str, str]:
    """Return ``("{length}h x {width}w", "cm")`` or two empty strings."""
    length_text = present_text(length)
    width_text = present_text(width)
    if not length_text and not width_text:
        return "", ""
    return (
        f"{length_text or '0'}h x {width_text or '0'}w",
        DIMENSION_UNIT,
    )


class RecordNormalizer:
    """Pure mapping from :class:`RawItem` to :class:`NormalizedRecord`."""

    def __init__(
        self,
        stock_policy: StockPolicy = StockPolicy.SUM,
        warehouse_code: str | None = None,
        stock_cap: int | None = None,
    ) -> None:
        self.stock_policy = stock_policy
        self.warehouse_code = (
            warehouse_code
            if warehouse_code is not None
            else Settings.EXTERNAL_WAREHOUSE_CODE
        )
        self.stock_cap = (
            stock_cap if stock_cap is not None else Settings.STOCK_CAP
        )

    def _quantity(self, item: RawItem) -> str:
        base = parse_quantity(item.product.get("qty"))
        external = external_quantity(
            item.stock_entries, self.warehouse_code
        )
        return quantity_text(
            base, external, self.stock_policy, self.stock_cap
        )

    def normalize(self, raw: Any) -> NormalizedRecord:
        """Normalize one raw catalog item. Never raises on bad input."""
        item = raw if isinstance(raw, RawItem) else RawItem(raw)
        product = item.product
        price = item.price
        dimension, dimension_unit = format_dimension(
            product.get("length"), product.get("width")
        )
        currency = (
            coerce_text(price.get("endUserPriceCurrency"))
            or coerce_text(price.get("customerPriceCurreny"))
            or DEFAULT_CURRENCY
        )

        return NormalizedRecord(
            top_group_code=coerce_text(item.category_code(1)),
            top_group_name=coerce_text(item.category_name(1)),
            main_group_code=coerce_text(item.category_code(2)),
            main_group_name=coerce_text(item.category_name(2)),
            sub_group_code=coerce_text(item.category_code(4)),
            sub_group_name=coerce_text(item.category_name(4)),
            code=coerce_text(product.get("productID")),
            name=coerce_text(product.get("name")),
            material_group=coerce_text(product.get("materialGroupValue")),
            material_group_code=coerce_text(product.get("materialGroupID")),
            currency=currency,
            end_user_price=format_price(price.get("endUserPrice")),
            dealer_price=format_price(price.get("customerPrice")),
            special_price=format_price(price.get("specialPrice")),
            quantity=self._quantity(item),
            warranty=present_text(product.get("warranty")),
            brand_code=coerce_text(product.get("exMaterialGroupID")),
            brand_name=coerce_text(product.get("exMaterialGroupValue")),
            tax_rate=coerce_text(product.get("vatRate")),
            volume=coerce_text(product.get("volume")),
            manufacturer_part_no=coerce_text(product.get("producerPartNo")),
            barcode=coerce_text(product.get("ean")),
            old_code=coerce_text(product.get("oldProductID")),
            dimension=dimension,
            dimension_unit=dimension_unit,
            net_weight=coerce_text(product.get("netWeight")),
            gross_weight=coerce_text(product.get("grossWeight")),
            origin=coerce_text(product.get("origin")),
            shop_categories=coerce_text(product.get("shopCategories")),
            special_stock=present_text(product.get("specialStock"), "0"),
            discount_percentage=present_text(
                price.get("discountPercentage")
            ),
        )

    def normalize_all(self, raw_items: list[Any]) -> list[NormalizedRecord]:
        """Normalize a sequence of raw items, preserving order."""
        records = [self.normalize(raw) for raw in raw_items]
        logger.debug(
            "Normalized %d records (stock policy=%s)",
            len(records),
            self.stock_policy.value,
        )
        return records
