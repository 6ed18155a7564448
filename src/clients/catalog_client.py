# src/clients/catalog_client.py

"""Client for the paginated remote product catalog API."""

import json
import logging
import time
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.catalog_query import CatalogQuery

_BODY_PREVIEW = 2000
_REDACTED_HEADERS = frozenset({"authorization"})


class UpstreamError(Exception):
    """A catalog page request failed.

    Carries everything needed to diagnose the failure from logs alone:
    the HTTP status and reason (``None`` / ``""`` for transport errors),
    the response body and headers, and the exact parameters and request
    headers that were sent.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        reason: str = "",
        body: str = "",
        params: dict[str, str] | None = None,
        url: str = "",
        response_headers: dict[str, str] | None = None,
        request_headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.body = body
        self.params: dict[str, str] = dict(params or {})
        self.url = url
        self.response_headers: dict[str, str] = dict(response_headers or {})
        self.request_headers: dict[str, str] = dict(request_headers or {})


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy *headers* with credentials masked for logging."""
    return {
        name: "***" if name.lower() in _REDACTED_HEADERS and value else value
        for name, value in headers.items()
    }


class CatalogClient:
    """Fetches raw catalog items page by page, one category at a time.

    Pages are requested sequentially with a fixed pause between them.
    There are no retries: a single failed page aborts the whole fetch.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_token: str | None = None,
    ) -> None:
        self.logger = logging.getLogger("catalog_feed.client")
        self.settings = Settings()
        self.api_url = api_url if api_url is not None else self.settings.API_URL
        self.api_token = (
            api_token if api_token is not None else self.settings.API_TOKEN
        )
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.api_token,
            "Content-Type": "application/json",
        }

    def fetch_page(self, query: CatalogQuery, page: int) -> dict[str, Any]:
        """Request one page and return the decoded JSON object.

        Raises ``UpstreamError`` on transport failure, a non-2xx status
        or a body that is not a JSON object.
        """
        params = query.to_params(page)
        headers = self._headers()
        try:
            resp = self.session.get(
                self.api_url,
                headers=headers,
                params=params,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            raise UpstreamError(
                f"Catalog request failed: {exc}",
                params=params,
                url=self.api_url,
                request_headers=redact_headers(headers),
            ) from exc

        body: str = resp.text or ""

        def failure(message: str) -> UpstreamError:
            return UpstreamError(
                message,
                status=resp.status_code,
                reason=str(getattr(resp, "reason", "") or ""),
                body=body[:_BODY_PREVIEW],
                params=params,
                url=self.api_url,
                response_headers=dict(resp.headers or {}),
                request_headers=redact_headers(headers),
            )

        if not 200 <= resp.status_code < 300:
            raise failure(f"Catalog API returned HTTP {resp.status_code}")

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise failure("Catalog API returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise failure("Catalog API returned an unexpected JSON shape")
        return payload

    @staticmethod
    def _page_items(payload: dict[str, Any]) -> list[Any]:
        data = payload.get("data")
        return data if isinstance(data, list) else []

    @staticmethod
    def _page_count(payload: dict[str, Any], current: int) -> int:
        """Read ``pageCount``; absent or unusable values keep *current*."""
        raw = payload.get("pageCount")
        try:
            count = int(raw)
        except (TypeError, ValueError):
            return current
        return count if count > 0 else current

    def _fetch_pages(self, query: CatalogQuery) -> list[Any]:
        """Run one full paginated fetch for a single-category query."""
        label = query.category or "all"

        if query.page is not None:
            payload = self.fetch_page(query, query.page)
            page_items = self._page_items(payload)
            self.logger.info(
                "[%s] Page %d (explicit) - %d items",
                label,
                query.page,
                len(page_items),
            )
            return page_items

        items: list[Any] = []
        current_page = 1
        page_count = 1
        while current_page <= page_count:
            payload = self.fetch_page(query, current_page)
            page_count = self._page_count(payload, page_count)
            page_items = self._page_items(payload)
            items.extend(page_items)
            self.logger.info(
                "[%s] Page %d/%d - %d items",
                label,
                current_page,
                page_count,
                len(page_items),
            )
            current_page += 1
            if current_page <= page_count:
                time.sleep(self.settings.PAGE_DELAY)
        return items

    def fetch_all(self, query: CatalogQuery) -> list[Any]:
        """Fetch every item for *query*, one pass per listed category.

        Results are concatenated in category order, then page order,
        then in-page order.
        """
        all_items: list[Any] = []
        for sub_query in query.split_by_category():
            all_items.extend(self._fetch_pages(sub_query))
        self.logger.info("Fetched %d catalog items", len(all_items))
        return all_items
