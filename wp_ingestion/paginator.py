from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from common.logger import get_logger
from wp_ingestion.document_models import PageResult

log = get_logger(__name__)

MAX_PAGES = 1000


def resolve_has_more(
    item_count: int,
    *,
    offset: Optional[int] = None,
    total: Optional[int] = None,
    page: Optional[int] = None,
    total_pages: Optional[int] = None,
) -> bool:
    """
    Decide whether another page should be requested, in priority order:
      1. explicit total count + cumulative offset
      2. total page count
      3. no metadata: keep going until an empty page comes back
    The last rule matters because some servers silently cap page size
    below what was requested, so a short page does not mean the end.
    """
    if total is not None and offset is not None:
        return offset + item_count < total
    if total_pages is not None and page is not None:
        return page < total_pages
    return item_count > 0


def fetch_all(
    fetch_page: Callable[[int], PageResult],
    label: str,
    max_pages: int = MAX_PAGES,
) -> List[Dict[str, Any]]:
    """
    Call `fetch_page(1)`, `fetch_page(2)`, ... and collect every item until the
    page reports no more results, comes back empty, or `max_pages` is reached.
    """
    items: List[Dict[str, Any]] = []
    page = 1
    log.info("Starting %s fetch with pagination...", label)

    while page <= max_pages:
        result = fetch_page(page)
        if not result.items:
            break

        items.extend(result.items)
        of_total = f" of {result.total}" if result.total else ""
        log.info(
            "Fetched %d %s from page %d (total so far: %d%s)",
            len(result.items),
            label,
            page,
            len(items),
            of_total,
        )
        if not result.has_more:
            break
        page += 1
    else:
        log.warning("Pagination safety limit reached (%d pages) for %s, stopping", max_pages, label)
        page = max_pages

    log.info("Finished fetching %s: %d total from %d page(s)", label, len(items), page)
    return items
