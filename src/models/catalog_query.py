# src/models/catalog_query.py

"""Catalog query model: the filter set for one fetch cycle."""

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class CatalogQuery:
    """Filter and pagination parameters sent to the catalog API.

    ``category`` may hold a comma-separated list; the client runs one
    paginated fetch per token via :meth:`split_by_category`.
    """

    product_type: int = 1
    fields_key: str = ""
    stock: bool = False
    category: str = ""
    brand: str = ""
    product_id: str = ""
    update_date: str = ""
    page: int | None = None
    page_size: int | None = None

    @classmethod
    def from_settings(cls, settings: Any) -> "CatalogQuery":
        """Build the process-wide query from a Settings object."""
        return cls(
            product_type=settings.PRODUCT_TYPE,
            fields_key=settings.FIELDS_KEY,
            stock=settings.STOCK,
            category=settings.CATEGORY,
            brand=settings.BRAND,
            product_id=settings.PRODUCT_ID,
            update_date=settings.UPDATE_DATE,
            page=settings.PAGE,
            page_size=settings.PAGE_SIZE,
        )

    def category_tokens(self) -> list[str]:
        """Return the trimmed, non-empty category tokens in listed order."""
        return [
            token.strip()
            for token in self.category.split(",")
            if token.strip()
        ]

    def split_by_category(self) -> list["CatalogQuery"]:
        """Derive one single-category query per token.

        With no usable tokens a single query without a category is
        returned, so callers always run at least one fetch.
        """
        tokens = self.category_tokens()
        if not tokens:
            return [replace(self, category="")]
        return [replace(self, category=token) for token in tokens]

    def to_params(self, page: int) -> dict[str, str]:
        """Build upstream query parameters for one page request."""
        params: dict[str, str] = {
            "ProductType": str(self.product_type),
            "Stock": "true" if self.stock else "false",
        }
        if self.fields_key:
            params["FieldsKey"] = self.fields_key
        if self.category:
            params["Category"] = self.category
        if self.brand:
            params["Brand"] = self.brand
        if self.product_id:
            params["ProductId"] = self.product_id
        if self.update_date:
            params["UpdateDate"] = self.update_date
        if self.page_size:
            params["PageSize"] = str(self.page_size)
        params["Page"] = str(page)
        return params

    def describe(self) -> dict[str, Any]:
        """JSON-friendly view of the query for status reporting."""
        return {
            "productType": self.product_type,
            "fieldsKey": self.fields_key or None,
            "stock": self.stock,
            "categories": self.category_tokens(),
            "brand": self.brand or None,
            "productId": self.product_id or None,
            "updateDate": self.update_date or None,
            "page": self.page,
            "pageSize": self.page_size,
        }
