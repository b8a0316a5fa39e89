"""
Inline resolution of reusable-block references.

The block editor stores a reusable block inside a post as a self-closing
comment carrying a JSON payload::

    <!-- wp:block {"ref":71} /-->

:func:`resolve_block_references` replaces every such marker with the content
of the referenced post, recursively. Two guards keep this bounded:

* a per-path visited set: a reference back to an ancestor on the current
  chain is dropped. Sibling branches each get their own copy, so a block
  reused in two places is fetched and inlined twice.
* a depth ceiling: past ``MAX_DEPTH`` the text is returned unchanged and any
  markers left in it stay unresolved.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from common.logger import get_logger
from wp_ingestion.document_models import ReferenceToken

log = get_logger(__name__)

MAX_DEPTH = 10

BLOCK_PATTERN = re.compile(r"<!--\s*wp:block\s+(\{[^}]*\"ref\"\s*:\s*(\d+)[^}]*\})\s*/-->")

FetchById = Callable[[int], Optional[Dict[str, Any]]]


def extract_block_references(content: str) -> List[ReferenceToken]:
    """All well-formed block references in `content`, in order of appearance."""
    references: List[ReferenceToken] = []
    for match in BLOCK_PATTERN.finditer(content):
        try:
            parsed = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            log.warning("Failed to parse block reference: %s (%s)", match.group(0), e)
            continue
        ref = parsed.get("ref") if isinstance(parsed, dict) else None
        # bool is an int subclass; {"ref": true} is not a post id
        if not ref or not isinstance(ref, int) or isinstance(ref, bool):
            continue
        references.append(
            ReferenceToken(ref=ref, start=match.start(), end=match.end(), full_match=match.group(0))
        )
    return references


def _resolve(
    content: str,
    fetch_by_id: FetchById,
    visited: FrozenSet[int],
    depth: int,
    max_depth: int,
) -> Tuple[str, bool]:
    """Returns (resolved text, whether the depth ceiling was hit somewhere below)."""
    if depth > max_depth:
        log.warning("Maximum recursion depth reached for block references")
        return content, True

    references = extract_block_references(content)
    if not references:
        return content, False

    parts: List[str] = []
    last_index = 0
    truncated = False

    for ref in references:
        parts.append(content[last_index : ref.start])
        last_index = ref.end

        if ref.ref in visited:
            log.warning("Circular reference detected for ref %d, skipping", ref.ref)
            continue

        block_post = fetch_by_id(ref.ref)
        if not block_post or not block_post.get("content"):
            continue

        block_content, block_truncated = _resolve(
            block_post["content"], fetch_by_id, visited | {ref.ref}, depth + 1, max_depth
        )
        truncated = truncated or block_truncated
        parts.append(block_content)

    parts.append(content[last_index:])
    result = "".join(parts)

    # Markers left behind by the depth ceiling stay put. Anything else that
    # still looks like a reference gets another pass one level deeper.
    # A truncated branch suppresses the re-pass for the whole result.
    if not truncated and extract_block_references(result):
        return _resolve(result, fetch_by_id, visited, depth + 1, max_depth)
    return result, truncated


def resolve_block_references(
    content: str,
    fetch_by_id: FetchById,
    visited: FrozenSet[int] = frozenset(),
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> str:
    """
    Inline every block reference in `content`.

    `fetch_by_id` returns the referenced post (a dict with a ``content`` key)
    or None when it does not exist; missing and circular references are
    dropped from the output.
    """
    resolved, _ = _resolve(content, fetch_by_id, frozenset(visited), depth, max_depth)
    return resolved
