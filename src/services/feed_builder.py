# src/services/feed_builder.py

"""Builds one complete feed document: fetch, normalize, render."""

import logging
from typing import Any

from src.clients.catalog_client import CatalogClient
from src.config.settings import Settings
from src.models.catalog_query import CatalogQuery
from src.models.rendered_document import RenderedDocument
from src.render.xml_renderer import XmlRenderer, XmlSchema, get_schema
from src.transform.normalizer import RecordNormalizer
from src.transform.stock import StockPolicy

logger = logging.getLogger("catalog_feed.builder")


def resolve_stock_policy(schema: XmlSchema, configured: str = "") -> StockPolicy:
    """Use the configured policy when given, else the schema's own."""
    if configured:
        return StockPolicy(configured.strip().lower())
    return schema.stock_policy


class FeedBuilder:
    """Runs the fetch → normalize → render pipeline for one query.

    Rendering starts only after every page of every category has been
    fetched; nothing is published from here.
    """

    def __init__(
        self,
        client: Any = None,
        schema: XmlSchema | None = None,
        stock_policy: StockPolicy | None = None,
    ) -> None:
        self.settings = Settings()
        self.client = client if client is not None else CatalogClient()
        self.schema = (
            schema if schema is not None else get_schema(self.settings.XML_SCHEMA)
        )
        self.stock_policy = (
            stock_policy
            if stock_policy is not None
            else resolve_stock_policy(self.schema, self.settings.STOCK_POLICY)
        )
        self.normalizer = RecordNormalizer(stock_policy=self.stock_policy)
        self.renderer = XmlRenderer(self.schema)

    def build(self, query: CatalogQuery) -> RenderedDocument:
        """Fetch and render the full catalog for *query*.

        ``UpstreamError`` from the client propagates unchanged.
        """
        raw_items = self.client.fetch_all(query)
        records = self.normalizer.normalize_all(raw_items)
        document = self.renderer.render(records)
        logger.info(
            "Built feed: %d items → %d records (schema=%s, stock=%s)",
            len(raw_items),
            document.record_count,
            self.schema.name,
            self.stock_policy.value,
        )
        return document

    def build_error(self, message: str) -> RenderedDocument:
        return self.renderer.render_error(message)
