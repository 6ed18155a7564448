# src/render/xml_renderer.py

"""Serialize normalized records into the fixed XML feed schemas.

Two schema generations are supported:

* ``stok``: one ``Stok`` element per record, every field an attribute.
  Quantity defaults to the capped ``"200+"`` policy.
* ``product``: one ``Product`` element per record, a child element per
  field over a smaller field set. Quantity defaults to base plus the
  external-warehouse bucket.

All values go through lxml's escaping; no CDATA sections are emitted.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from lxml import etree

from src.models.product_record import NormalizedRecord
from src.models.rendered_document import RenderedDocument, iso_utc
from src.transform.stock import StockPolicy

logger = logging.getLogger("catalog_feed.render")

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>\n'
ROOT_TAG = "Products"
ERROR_TAG = "Error"

# Characters XML 1.0 cannot represent, even escaped.
_INVALID_XML_CHARS = re.compile(
    "[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def xml_safe(text: str) -> str:
    """Drop characters that XML 1.0 cannot carry."""
    return _INVALID_XML_CHARS.sub("", text)


@dataclass(frozen=True)
class XmlSchema:
    """Layout of one feed schema generation."""

    name: str
    item_tag: str
    use_attributes: bool
    fields: tuple[tuple[str, str], ...]   # (xml name, record attribute)
    stock_policy: StockPolicy


STOK_SCHEMA = XmlSchema(
    name="stok",
    item_tag="Stok",
    use_attributes=True,
    fields=(
        ("UstGrup_Kod", "top_group_code"),
        ("UstGrup_Ad", "top_group_name"),
        ("AnaGrup_Kod", "main_group_code"),
        ("AnaGrup_Ad", "main_group_name"),
        ("AltGrup_Kod", "sub_group_code"),
        ("AltGrup_Ad", "sub_group_name"),
        ("Kod", "code"),
        ("Ad", "name"),
        ("UrunGrubu", "material_group"),
        ("UrunGrubuKodu", "material_group_code"),
        ("Doviz", "currency"),
        ("Fiyat_SKullanici", "end_user_price"),
        ("Fiyat_Bayi", "dealer_price"),
        ("Fiyat_Ozel", "special_price"),
        ("Miktar", "quantity"),
        ("Garanti", "warranty"),
        ("Marka", "brand_code"),
        ("MarkaIsim", "brand_name"),
        ("Vergi", "tax_rate"),
        ("Desi", "volume"),
        ("UreticiKod", "manufacturer_part_no"),
        ("UreticiBarkodNo", "barcode"),
        ("Eski_Kod", "old_code"),
        ("Boyut", "dimension"),
        ("Boyut_Birim", "dimension_unit"),
        ("Net_Agirlik", "net_weight"),
        ("Brut_Agirlik", "gross_weight"),
        ("Mensei", "origin"),
        ("OzelKategori", "shop_categories"),
        ("Ozel_Stok", "special_stock"),
        ("IskontoYuzde", "discount_percentage"),
    ),
    stock_policy=StockPolicy.CAP,
)

PRODUCT_SCHEMA = XmlSchema(
    name="product",
    item_tag="Product",
    use_attributes=False,
    fields=(
        ("UstGrup_Ad", "top_group_name"),
        ("AnaGrup_Ad", "main_group_name"),
        ("AltGrup_Ad", "sub_group_name"),
        ("Kod", "code"),
        ("Ad", "name"),
        ("UrunGrubu", "material_group"),
        ("UrunGrubuKodu", "material_group_code"),
        ("Doviz", "currency"),
        ("Fiyat_SKullanici", "end_user_price"),
        ("Fiyat_Bayi", "dealer_price"),
        ("Fiyat_Ozel", "special_price"),
        ("Miktar", "quantity"),
        ("Marka", "brand_code"),
        ("MarkaIsim", "brand_name"),
        ("Vergi", "tax_rate"),
        ("UreticiBarkodNo", "barcode"),
    ),
    stock_policy=StockPolicy.SUM,
)

SCHEMAS: dict[str, XmlSchema] = {
    STOK_SCHEMA.name: STOK_SCHEMA,
    PRODUCT_SCHEMA.name: PRODUCT_SCHEMA,
}


def get_schema(name: str) -> XmlSchema:
    """Look up a schema by name (case-insensitive)."""
    try:
        return SCHEMAS[name.strip().lower()]
    except KeyError:
        valid = ", ".join(sorted(SCHEMAS))
        msg = f"Unknown XML schema '{name}' (expected one of: {valid})"
        raise ValueError(msg) from None


def _serialize(root: etree._Element) -> bytes:
    body: bytes = etree.tostring(
        root,
        encoding="UTF-8",
        xml_declaration=False,
        pretty_print=True,
    )
    return XML_DECLARATION + body


class XmlRenderer:
    """Render record sequences (or a failure message) into XML documents."""

    def __init__(self, schema: XmlSchema = STOK_SCHEMA) -> None:
        self.schema = schema

    def _append_record(
        self,
        root: etree._Element,
        record: NormalizedRecord,
    ) -> None:
        if self.schema.use_attributes:
            attrs = {
                xml_name: xml_safe(getattr(record, attr))
                for xml_name, attr in self.schema.fields
            }
            etree.SubElement(root, self.schema.item_tag, attrs)
            return

        element = etree.SubElement(root, self.schema.item_tag)
        for xml_name, attr in self.schema.fields:
            child = etree.SubElement(element, xml_name)
            child.text = xml_safe(getattr(record, attr))

    def render(self, records: list[NormalizedRecord]) -> RenderedDocument:
        """Render the full record sequence into one document."""
        root = etree.Element(ROOT_TAG)
        for record in records:
            self._append_record(root, record)
        content = _serialize(root)
        logger.info(
            "Rendered %d records as '%s' XML (%d bytes)",
            len(records),
            self.schema.name,
            len(content),
        )
        return RenderedDocument(
            content=content,
            generated_at=datetime.now(timezone.utc),
            is_error=False,
            record_count=len(records),
            schema=self.schema.name,
        )

    def render_error(self, message: str) -> RenderedDocument:
        """Render the error stand-in: a marked root with one message."""
        generated_at = datetime.now(timezone.utc)
        root = etree.Element(
            ROOT_TAG,
            {"error": "true", "generatedAt": iso_utc(generated_at) or ""},
        )
        error = etree.SubElement(root, ERROR_TAG)
        error.text = xml_safe(message)
        return RenderedDocument(
            content=_serialize(root),
            generated_at=generated_at,
            is_error=True,
            record_count=0,
            schema=self.schema.name,
        )
