# tests/test_catalog_client.py

"""Tests for the catalog client using mocked HTTP responses."""

import json
import unittest
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

from src.clients.catalog_client import CatalogClient, UpstreamError
from src.models.catalog_query import CatalogQuery

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _response(
    payload: Any,
    status_code: int = 200,
    reason: str = "OK",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build a mock response carrying *payload* as JSON text."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.headers = headers or {}
    resp.text = payload if isinstance(payload, str) else json.dumps(payload)
    return resp


def _fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return data


class _ClientTestCase(unittest.TestCase):
    """Creates a client whose session is a MagicMock."""

    def setUp(self) -> None:
        with patch("src.clients.catalog_client.curl_requests.Session"):
            self.client = CatalogClient(
                api_url="https://api.example.com/products",
                api_token="Bearer secret",
            )
        self.session = MagicMock()
        self.client.session = self.session

    def sent_pages(self) -> list[str]:
        return [
            c.kwargs["params"]["Page"] for c in self.session.get.call_args_list
        ]


class TestPagination(_ClientTestCase):
    """Multi-page fetch behaviour."""

    def test_fetches_all_pages_in_order(self) -> None:
        """Items are concatenated page-ascending, then in-page order."""
        self.session.get.side_effect = [
            _response(_fixture("catalog_page1.json")),
            _response(_fixture("catalog_page2.json")),
        ]
        items = self.client.fetch_all(CatalogQuery())

        self.assertEqual(len(items), 3)
        codes = [i["product"]["productID"] for i in items]
        self.assertEqual(codes, ["P-1001", "P-1002", "P-2001"])
        self.assertEqual(self.sent_pages(), ["1", "2"])

    def test_item_count_is_sum_of_pages(self) -> None:
        """Three pages of 2, 3 and 1 items give 6 items."""
        self.session.get.side_effect = [
            _response({"pageCount": 3, "data": [{"n": 1}, {"n": 2}]}),
            _response({"pageCount": 3, "data": [{"n": 3}, {"n": 4}, {"n": 5}]}),
            _response({"pageCount": 3, "data": [{"n": 6}]}),
        ]
        items = self.client.fetch_all(CatalogQuery())
        self.assertEqual([i["n"] for i in items], [1, 2, 3, 4, 5, 6])

    def test_missing_page_count_means_single_page(self) -> None:
        """Without pageCount only page 1 is requested."""
        self.session.get.return_value = _response({"data": [{"n": 1}]})
        items = self.client.fetch_all(CatalogQuery())
        self.assertEqual(len(items), 1)
        self.assertEqual(self.session.get.call_count, 1)

    def test_invalid_page_count_means_single_page(self) -> None:
        """Non-numeric or zero pageCount falls back to one page."""
        for bad in ("many", 0, None, -3):
            with self.subTest(page_count=bad):
                self.session.reset_mock()
                self.session.get.side_effect = None
                self.session.get.return_value = _response(
                    {"pageCount": bad, "data": []}
                )
                self.client.fetch_all(CatalogQuery())
                self.assertEqual(self.session.get.call_count, 1)

    def test_page_count_missing_midway_keeps_last_known(self) -> None:
        """A later page without pageCount does not end the fetch early."""
        self.session.get.side_effect = [
            _response({"pageCount": 3, "data": [{"n": 1}]}),
            _response({"data": [{"n": 2}]}),
            _response({"pageCount": 3, "data": [{"n": 3}]}),
        ]
        items = self.client.fetch_all(CatalogQuery())
        self.assertEqual([i["n"] for i in items], [1, 2, 3])
        self.assertEqual(self.sent_pages(), ["1", "2", "3"])

    def test_missing_data_yields_no_items(self) -> None:
        """A page without a data list contributes zero items."""
        self.session.get.return_value = _response(
            {"pageCount": 1, "data": "oops"}
        )
        self.assertEqual(self.client.fetch_all(CatalogQuery()), [])

    def test_sleeps_between_pages_only(self) -> None:
        """Pacing happens before each follow-up page, not after the last."""
        self.session.get.side_effect = [
            _response({"pageCount": 3, "data": []}),
            _response({"pageCount": 3, "data": []}),
            _response({"pageCount": 3, "data": []}),
        ]
        with patch("src.clients.catalog_client.time.sleep") as mock_sleep:
            self.client.fetch_all(CatalogQuery())
        self.assertEqual(mock_sleep.call_count, 2)
        mock_sleep.assert_called_with(0.5)


class TestExplicitPage(_ClientTestCase):
    """A query with an explicit page issues exactly one request."""

    def test_single_request_ignores_page_count(self) -> None:
        """pageCount of 5 does not trigger further requests."""
        self.session.get.return_value = _response(
            {"pageCount": 5, "data": [{"n": 1}, {"n": 2}]}
        )
        items = self.client.fetch_all(CatalogQuery(page=3))
        self.assertEqual(len(items), 2)
        self.assertEqual(self.session.get.call_count, 1)
        self.assertEqual(self.sent_pages(), ["3"])

    def test_single_request_per_category(self) -> None:
        """Explicit page with two categories gives one request each."""
        self.session.get.return_value = _response(
            {"pageCount": 9, "data": [{"n": 1}]}
        )
        items = self.client.fetch_all(CatalogQuery(page=2, category="A,B"))
        self.assertEqual(len(items), 2)
        self.assertEqual(self.session.get.call_count, 2)


class TestCategories(_ClientTestCase):
    """Multi-category fetch behaviour."""

    def test_one_fetch_per_category_in_listed_order(self) -> None:
        """Tokens are trimmed, empties dropped, order preserved."""
        def respond(*_args: Any, **kwargs: Any) -> MagicMock:
            category = kwargs["params"].get("Category")
            return _response({"data": [{"category": category}]})

        self.session.get.side_effect = respond
        items = self.client.fetch_all(
            CatalogQuery(category=" NTB , ,AKS,  ")
        )
        self.assertEqual(
            [i["category"] for i in items], ["NTB", "AKS"]
        )

    def test_no_category_sends_no_category_param(self) -> None:
        """Without categories one fetch runs with no Category param."""
        self.session.get.return_value = _response({"data": []})
        self.client.fetch_all(CatalogQuery())
        params = self.session.get.call_args.kwargs["params"]
        self.assertNotIn("Category", params)


class TestRequestShape(_ClientTestCase):
    """Headers and parameters sent upstream."""

    def test_headers_and_params(self) -> None:
        """Token is forwarded and configured filters are sent."""
        self.session.get.return_value = _response({"data": []})
        query = CatalogQuery(
            product_type=2,
            fields_key="FK",
            stock=True,
            brand="ACME",
            page_size=100,
        )
        self.client.fetch_all(query)

        call = self.session.get.call_args
        self.assertEqual(call.args[0], "https://api.example.com/products")
        self.assertEqual(
            call.kwargs["headers"],
            {
                "Authorization": "Bearer secret",
                "Content-Type": "application/json",
            },
        )
        self.assertEqual(
            call.kwargs["params"],
            {
                "ProductType": "2",
                "Stock": "true",
                "FieldsKey": "FK",
                "Brand": "ACME",
                "PageSize": "100",
                "Page": "1",
            },
        )


class TestUpstreamErrors(_ClientTestCase):
    """Failures raise UpstreamError with diagnostic context."""

    def test_http_error_carries_status_body_params(self) -> None:
        """A 401 response raises with status, body and parameters."""
        self.session.get.return_value = _response(
            '{"message": "invalid token"}', status_code=401
        )
        with self.assertRaises(UpstreamError) as ctx:
            self.client.fetch_all(CatalogQuery(category="NTB"))

        err = ctx.exception
        self.assertEqual(err.status, 401)
        self.assertIn("invalid token", err.body)
        self.assertEqual(err.params["Category"], "NTB")
        self.assertEqual(err.params["Page"], "1")
        self.assertEqual(err.url, "https://api.example.com/products")

    def test_http_error_carries_headers_and_reason(self) -> None:
        """Response headers, status text and masked request headers are kept."""
        self.session.get.return_value = _response(
            "busy",
            status_code=503,
            reason="Service Unavailable",
            headers={"Retry-After": "120"},
        )
        with self.assertRaises(UpstreamError) as ctx:
            self.client.fetch_all(CatalogQuery())

        err = ctx.exception
        self.assertEqual(err.reason, "Service Unavailable")
        self.assertEqual(err.response_headers, {"Retry-After": "120"})
        self.assertEqual(err.request_headers["Authorization"], "***")
        self.assertEqual(
            err.request_headers["Content-Type"], "application/json"
        )

    def test_failed_page_aborts_whole_fetch(self) -> None:
        """Page 2 failing raises; no third request, no retry."""
        self.session.get.side_effect = [
            _response({"pageCount": 3, "data": [{"n": 1}]}),
            _response("boom", status_code=500),
        ]
        with self.assertRaises(UpstreamError) as ctx:
            self.client.fetch_all(CatalogQuery())
        self.assertEqual(ctx.exception.params["Page"], "2")
        self.assertEqual(self.session.get.call_count, 2)

    def test_transport_error_wrapped(self) -> None:
        """Connection errors become UpstreamError without a status."""
        self.session.get.side_effect = ConnectionError("refused")
        with self.assertRaises(UpstreamError) as ctx:
            self.client.fetch_all(CatalogQuery())
        self.assertIsNone(ctx.exception.status)
        self.assertIn("refused", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)

    def test_non_json_body(self) -> None:
        """An HTML body on 200 is a malformed response."""
        self.session.get.return_value = _response("<html>maintenance</html>")
        with self.assertRaises(UpstreamError) as ctx:
            self.client.fetch_all(CatalogQuery())
        self.assertEqual(ctx.exception.status, 200)
        self.assertIn("maintenance", ctx.exception.body)

    def test_json_array_body(self) -> None:
        """A top-level JSON array is rejected."""
        self.session.get.return_value = _response([1, 2, 3])
        with self.assertRaises(UpstreamError):
            self.client.fetch_all(CatalogQuery())


if __name__ == "__main__":
    unittest.main()
