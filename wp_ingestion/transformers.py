from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from langchain_core.documents import Document

from common.config import ChunkingConfig
from wp_ingestion.chunkers import chunk_content, estimate_tokens
from wp_ingestion.cleaners import html_to_markdown
from wp_ingestion.document_models import TransformedDocument

ResolveFn = Callable[[str, Optional[int]], str]


def _build_documents(
    content: str, base_metadata: Dict[str, Any], chunking: ChunkingConfig
) -> List[TransformedDocument]:
    """One document when `content` fits under `max_tokens`, else one per chunk."""
    doc_id = base_metadata["id"]
    token_size = estimate_tokens(content, chunking.chars_per_token)

    if token_size <= chunking.max_tokens:
        return [
            TransformedDocument(
                document=Document(page_content=content, metadata=dict(base_metadata)),
                token_size=token_size,
                original_id=doc_id,
            )
        ]

    chunks = chunk_content(
        content, chunking.chunk_size, chunking.overlap, chunking.chars_per_token
    )
    return [
        TransformedDocument(
            document=Document(
                page_content=chunk.content,
                metadata={**base_metadata, "chunkedId": f"{doc_id}-{chunk.index + 1}"},
            ),
            token_size=chunk.token_size,
            is_chunked=True,
            original_id=doc_id,
            chunk_index=chunk.index + 1,
            total_chunks=len(chunks),
        )
        for chunk in chunks
    ]


def transform_post(
    post: Dict[str, Any],
    chunking: ChunkingConfig,
    resolve: Optional[ResolveFn] = None,
    content_type: str = "post",
    default_title: str = "Untitled",
) -> List[TransformedDocument]:
    """
    Turn a post or page from the REST API into documents.

    `resolve(content, own_id)` inlines block references before the HTML is
    converted; pass None to skip reference resolution.
    """
    title = post.get("title") or default_title
    raw_content = post.get("content") or ""
    if resolve is not None:
        raw_content = resolve(raw_content, post.get("ID"))
    body = html_to_markdown(raw_content)

    base_metadata = {
        "id": f"{post.get('site_ID') or ''}{post.get('ID') or ''}",
        "url": post.get("URL") or "",
        "title": title,
        "type": content_type,
        "createdDate": post.get("date"),
        "modifiedDate": post.get("modified"),
    }
    return _build_documents(f"{title}\n\n{body}", base_metadata, chunking)


def _first_organizer_id(event: Dict[str, Any]) -> Any:
    organizers = event.get("organizer")
    if isinstance(organizers, list) and organizers:
        first = organizers[0]
        if isinstance(first, dict):
            return first.get("id")
    return None


def transform_event(
    event: Dict[str, Any],
    chunking: ChunkingConfig,
    default_title: str = "Untitled",
) -> List[TransformedDocument]:
    """Tribe event -> documents, same layout as posts plus event fields."""
    title = event.get("title") or default_title
    body = html_to_markdown(event.get("description") or "")

    venue = event.get("venue")
    categories = event.get("categories")
    if not isinstance(categories, list):
        categories = []
    categories = [c for c in categories if isinstance(c, dict)]

    base_metadata = {
        "id": str(event.get("id") or ""),
        "url": event.get("url") or event.get("link") or "",
        "title": title,
        "type": "event",
        "createdDate": event.get("date"),
        "modifiedDate": event.get("modified"),
        "venueId": (venue.get("id") if isinstance(venue, dict) else None) or None,
        "organizerId": _first_organizer_id(event) or None,
        "startDate": event.get("start_date"),
        "endDate": event.get("end_date"),
        "cost": event.get("cost") or None,
        "categories": [c["name"] for c in categories if c.get("name")],
        "categoryIDs": [c["id"] for c in categories if c.get("id") is not None],
    }
    return _build_documents(f"{title}\n\n{body}", base_metadata, chunking)
