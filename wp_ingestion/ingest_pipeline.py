from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import orjson
from langchain_core.documents import Document
from tqdm import tqdm

from common.config import GlobalYAMLConfig
from common.logger import get_logger
from wp_ingestion.chunkers import estimate_tokens
from wp_ingestion.document_models import ExtractionSummary, TransformedDocument
from wp_ingestion.paginator import fetch_all
from wp_ingestion.references import resolve_block_references
from wp_ingestion.transformers import transform_event, transform_post
from wp_ingestion.wordpress_api import WordPressClient

log = get_logger(__name__)


def _truncate(text: str, limit: int = 100) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def filter_by_path(items: List[Dict[str, Any]], filter_path: str, label: str) -> List[Dict[str, Any]]:
    """Keep items whose URL contains `filter_path`; no-op when the filter is empty."""
    if not filter_path:
        return items
    kept = [item for item in items if filter_path in (item.get("URL") or "")]
    log.info(
        "Filtered to %d %s matching filterPath: %r (removed %d)",
        len(kept),
        label,
        filter_path,
        len(items) - len(kept),
    )
    return kept


class _Collector:
    """Accumulates output documents plus the bookkeeping for the run summary."""

    def __init__(self, chars_per_token: int):
        self.chars_per_token = chars_per_token
        self.documents: List[Document] = []
        self.token_sizes: List[Dict[str, Any]] = []
        self.chunked: List[Dict[str, Any]] = []

    def add(self, title: str, original_text: str, transformed: List[TransformedDocument]) -> None:
        first = transformed[0]
        if first.is_chunked:
            # sized from the raw HTML, not the converted text used for unchunked items
            original_size = estimate_tokens(original_text, self.chars_per_token)
            self.chunked.append(
                {
                    "title": title,
                    "original_id": first.original_id,
                    "original_token_size": original_size,
                    "total_chunks": first.total_chunks,
                    "chunk_sizes": [t.token_size for t in transformed],
                }
            )
            self.token_sizes.append({"title": title, "token_size": original_size, "id": first.original_id})
        else:
            self.token_sizes.append(
                {"title": title, "token_size": first.token_size, "id": first.document.metadata["id"]}
            )
        # chunk bookkeeping stays out of the returned documents
        self.documents.extend(t.document for t in transformed)

    def summary(self, top: int = 5) -> ExtractionSummary:
        largest = sorted(self.token_sizes, key=lambda x: x["token_size"], reverse=True)[:top]
        return ExtractionSummary(
            original_items=len(self.token_sizes),
            total_documents=len(self.documents),
            chunked_items=len(self.chunked),
            largest=largest,
        )


def _log_items(items: Iterable[Dict[str, Any]], label: str) -> None:
    log.debug("%s:", label.capitalize())
    for index, item in enumerate(items, start=1):
        log.debug(
            '%d. Title: "%s" | URL: %s | Content: %s',
            index,
            item.get("title") or "Untitled",
            item.get("URL") or item.get("url") or "N/A",
            _truncate(item.get("content") or item.get("description") or ""),
        )


def _process_posts(
    client: WordPressClient, config: GlobalYAMLConfig, collector: _Collector, content_type: str
) -> None:
    label = f"{content_type}s"
    log.info("Accessing WordPress %s...", label)
    try:
        items = fetch_all(lambda page: client.posts_page(content_type, page), label)
        log.info("Fetched %d %s...", len(items), label)
        items = filter_by_path(items, config.extraction.filter_path, label)
        _log_items(items, label)

        def resolve(content: str, own_id: Optional[int]) -> str:
            visited = frozenset([own_id]) if isinstance(own_id, int) else frozenset()
            return resolve_block_references(content, client.post_by_id, visited)

        log.info("Processing %d %s...", len(items), label)
        for item in tqdm(items, desc=f"Transforming {label}"):
            transformed = transform_post(
                item,
                config.chunking,
                resolve=resolve,
                content_type=content_type,
                default_title=config.extraction.default_title,
            )
            collector.add(
                item.get("title") or config.extraction.default_title,
                f"{item.get('title') or ''}\n\n{item.get('content') or ''}",
                transformed,
            )
    except Exception as e:
        log.error("Error processing %s: %s", label, e)
        raise


def _process_events(client: WordPressClient, config: GlobalYAMLConfig, collector: _Collector) -> None:
    log.info("Accessing WordPress tribe events...")
    try:
        events = fetch_all(client.events_page, "tribe events")
        log.info("Fetched %d tribe events...", len(events))
        _log_items(events, "tribe events")

        for event in tqdm(events, desc="Transforming tribe events"):
            transformed = transform_event(
                event, config.chunking, default_title=config.extraction.default_title
            )
            collector.add(
                event.get("title") or config.extraction.default_title,
                f"{event.get('title') or ''}\n\n{event.get('description') or ''}",
                transformed,
            )
    except Exception as e:
        # events are optional: keep whatever posts/pages produced
        log.error("Error processing tribe events: %s", e)


def log_summary(summary: ExtractionSummary) -> None:
    log.info("Largest %d documents by token size:", len(summary.largest))
    for index, item in enumerate(summary.largest, start=1):
        log.info('%d. "%s" - %d tokens (ID: %s)', index, item["title"], item["token_size"], item["id"])
    log.info("Original items: %d", summary.original_items)
    log.info("Total documents created: %d", summary.total_documents)
    if summary.chunked_items:
        log.info("Items that were chunked: %d", summary.chunked_items)


def extract_all_with_summary(
    config: GlobalYAMLConfig, client: Optional[WordPressClient] = None
) -> Tuple[List[Document], ExtractionSummary]:
    """
    Run every enabled source in order (posts, pages, events).
    - Posts/pages failures propagate; nothing partial is returned
    - Events failures are logged and the run continues without them
    """
    client = client or WordPressClient(config.extraction, config.api)
    collector = _Collector(config.chunking.chars_per_token)

    if config.extraction.include_posts:
        _process_posts(client, config, collector, "post")
    if config.extraction.include_pages:
        _process_posts(client, config, collector, "page")
    if config.extraction.include_events:
        _process_events(client, config, collector)

    summary = collector.summary()
    log_summary(summary)
    return collector.documents, summary


def extract_all(config: GlobalYAMLConfig, client: Optional[WordPressClient] = None) -> List[Document]:
    documents, _ = extract_all_with_summary(config, client)
    return documents


def documents_to_records(documents: Iterable[Document]) -> List[Dict[str, Any]]:
    return [{"pageContent": d.page_content, "metadata": d.metadata} for d in documents]


def write_documents(documents: Iterable[Document], out: Path | None = None) -> None:
    """Write documents as a JSON array to `out`, or to stdout when `out` is None."""
    payload = orjson.dumps(documents_to_records(documents), option=orjson.OPT_INDENT_2)
    if out is None:
        sys.stdout.buffer.write(payload + b"\n")
        sys.stdout.flush()
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(payload)
    log.info("Wrote documents to %s", out)
