# src/models/product_record.py

"""Normalized product record: the canonical output shape."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NormalizedRecord:
    """One catalog product reshaped into the fixed output field set.

    All values are already text; escaping happens at render time.
    """

    top_group_code: str = ""
    top_group_name: str = ""
    main_group_code: str = ""
    main_group_name: str = ""
    sub_group_code: str = ""
    sub_group_name: str = ""
    code: str = ""
    name: str = ""
    material_group: str = ""
    material_group_code: str = ""
    currency: str = "USD"
    end_user_price: str = ""
    dealer_price: str = ""
    special_price: str = ""
    quantity: str = "0"
    warranty: str = ""
    brand_code: str = ""
    brand_name: str = ""
    tax_rate: str = ""
    volume: str = ""
    manufacturer_part_no: str = ""
    barcode: str = ""
    old_code: str = ""
    dimension: str = ""
    dimension_unit: str = ""
    net_weight: str = ""
    gross_weight: str = ""
    origin: str = ""
    shop_categories: str = ""
    special_stock: str = "0"
    discount_percentage: str = ""
