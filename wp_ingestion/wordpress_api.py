"""
Page-level adapters over the two WordPress APIs the extractor reads.

* WordPress.com REST v1.1 ``/sites/{site}/posts``: posts and pages, offset
  pagination with a ``found`` total. Needs a bearer token.
* The Events Calendar ``/wp-json/tribe/events/v1/events``: page-number
  pagination with ``total_pages``. Public.

Each adapter returns a :class:`PageResult`, so :func:`paginator.fetch_all`
can drive any of them. Failure policy differs by source: posts/pages raise,
single-post lookups turn 404 into ``None``, events never raise.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Optional

from common.config import ApiConfig, ExtractionConfig
from common.logger import get_logger
from wp_ingestion.dates import Clock, days_to_iso8601, events_date_window, now
from wp_ingestion.document_models import PageResult
from wp_ingestion.errors import (
    MalformedResponseError,
    NotFoundError,
    WordPressError,
    raise_for_status,
)
from wp_ingestion.http_client import HttpResponse, http_get
from wp_ingestion.paginator import resolve_has_more

log = get_logger(__name__)

POST_FIELDS = "ID,site_ID,title,URL,modified,date,content"

HttpGet = Callable[..., HttpResponse]


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)[:2000]


def _count_field(data: Dict[str, Any], key: str, url: str) -> Optional[int]:
    """An optional integer pagination field; anything else is a malformed payload."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedResponseError(f"Unexpected {key}={value!r} in response from {url}", url=url)
    return value


class WordPressClient:
    def __init__(
        self,
        extraction: ExtractionConfig,
        api: Optional[ApiConfig] = None,
        *,
        http: HttpGet = http_get,
        clock: Clock = now,
    ):
        self.extraction = extraction
        self.api = api or ApiConfig()
        self._http = http
        self._clock = clock
        self.headers: Dict[str, str] = {"User-Agent": self.api.user_agent}
        if extraction.token:
            log.info("Setting up authentication...")
            self.headers["Authorization"] = f"Bearer {extraction.token}"

    @property
    def page_size(self) -> int:
        return self.extraction.number or 100

    def _get(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self._http(
            url,
            headers=self.headers if headers is None else headers,
            params=params,
            timeout=self.api.timeout,
            max_retries=self.api.max_retries,
        )

    def _sites_url(self, suffix: str) -> str:
        base = self.api.base_url.rstrip("/") + "/" + self.api.base_path.strip("/")
        return f"{base}/{self.extraction.site_identifier}/{suffix}"

    # ------------------------------------------------------------------
    # posts and pages
    # ------------------------------------------------------------------

    def posts_page(self, content_type: str, page: int = 1) -> PageResult:
        """One page of posts (`content_type="post"`) or pages (`"page"`)."""
        per_page = self.page_size
        offset = (page - 1) * per_page
        params: Dict[str, Any] = {"number": per_page, "offset": offset}
        if self.extraction.get_protected:
            params["context"] = "edit"
        params["fields"] = POST_FIELDS
        params["type"] = content_type
        modified_after = days_to_iso8601(self.extraction.modified_after_days, self._clock)
        if modified_after:
            params["modified_after"] = modified_after

        url = self._sites_url("posts")
        log.info("Fetching %ss page %d (offset %d)", content_type, page, offset)
        resp = self._get(url, params)
        try:
            raise_for_status(
                resp,
                not_found_message="Not found (404): The WordPress SiteID may be incorrect",
            )
        except WordPressError:
            log.debug("Request URL: %s", resp.url)
            log.debug("Error response: %s", _dump(resp.body))
            raise

        data = resp.body
        if not isinstance(data, dict) or not isinstance(data.get("posts"), list):
            log.error("Unexpected response format: %s", _dump(data))
            raise MalformedResponseError(
                f"Unexpected response format for {content_type}s from {resp.url}",
                status=resp.status,
                url=resp.url,
            )

        posts = data["posts"]
        found = _count_field(data, "found", resp.url)
        return PageResult(
            items=posts,
            has_more=resolve_has_more(len(posts), offset=offset, total=found),
            total=found,
        )

    def post_by_id(self, post_id: int) -> Optional[Dict[str, Any]]:
        """A single post, or None when it does not exist (404) or carries no content."""
        params: Dict[str, Any] = {}
        if self.extraction.get_protected:
            params["context"] = "edit"
        params["fields"] = POST_FIELDS

        resp = self._get(self._sites_url(f"posts/{post_id}"), params)
        try:
            raise_for_status(resp)
        except NotFoundError:
            log.warning("Post %d not found (404), skipping block reference", post_id)
            return None

        data = resp.body
        if isinstance(data, dict) and data.get("content"):
            return data
        log.warning("Unexpected response format for post %d: %s", post_id, _dump(data))
        return None

    # ------------------------------------------------------------------
    # tribe events
    # ------------------------------------------------------------------

    def _events_url(self) -> str:
        domain = re.sub(r"^https?://", "", self.extraction.site_domain).rstrip("/")
        return f"https://{domain}/wp-json/tribe/events/v1/events"

    def events_page(self, page: int = 1) -> PageResult:
        """One page of events. Every failure degrades to an empty final page."""
        if not self.extraction.site_domain:
            log.warning("SiteDomain is required for fetching tribe events")
            return PageResult(items=[], has_more=False, total=0)

        params: Dict[str, Any] = {
            "per_page": self.page_size,
            "page": page,
            "_tribe_event_fields": "all",
        }
        # The API only returns roughly two years of events unless told otherwise
        starts_after = days_to_iso8601(self.extraction.modified_after_days, self._clock)
        if starts_after:
            params["starts_after"] = starts_after
        else:
            params["start_date"], params["end_date"] = events_date_window(self._clock)

        url = self._events_url()
        log.info("Fetching tribe events page %d: %s", page, url)
        try:
            resp = self._get(url, params, headers={"User-Agent": self.api.user_agent})
            raise_for_status(resp, not_found_message="Tribe events endpoint not found (404)")
        except WordPressError as e:
            log.warning("Error fetching tribe events, skipping: %s", e)
            return PageResult(items=[], has_more=False, total=0)

        data = resp.body
        if isinstance(data, dict) and isinstance(data.get("events"), list):
            events = data["events"]
            try:
                total = _count_field(data, "total", resp.url)
                total_pages = _count_field(data, "total_pages", resp.url)
                if total_pages is None:
                    total_pages = _count_field(data, "pages", resp.url)
            except MalformedResponseError as e:
                log.warning("Error parsing tribe events page %d, skipping: %s", page, e)
                return PageResult(items=[], has_more=False, total=0)
            if page == 1:
                log.debug(
                    "Tribe Events API response keys: %s (total=%s, total_pages=%s)",
                    sorted(data),
                    total,
                    total_pages,
                )
            return PageResult(
                items=events,
                has_more=resolve_has_more(len(events), page=page, total_pages=total_pages),
                total=total,
            )
        if isinstance(data, list):
            return PageResult(items=data, has_more=resolve_has_more(len(data)))

        log.warning("Unexpected response format for tribe events: %s", _dump(data))
        return PageResult(items=[], has_more=False, total=0)
