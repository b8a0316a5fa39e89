from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langchain_core.documents import Document


@dataclass
class PageResult:
    items: List[Dict[str, Any]]  # raw API records, untouched
    has_more: bool
    total: Optional[int] = None  # "found" for posts, "total" for events


@dataclass(frozen=True)
class ReferenceToken:
    ref: int  # referenced post id
    start: int  # [start, end) offsets in the source text
    end: int
    full_match: str


@dataclass(frozen=True)
class ChunkDescriptor:
    content: str
    index: int  # 0-based
    token_size: int


@dataclass
class TransformedDocument:
    document: Document
    token_size: int
    is_chunked: bool = False
    original_id: str = ""
    chunk_index: Optional[int] = None  # 1-based when chunked
    total_chunks: int = 1


@dataclass
class ExtractionSummary:
    original_items: int = 0
    total_documents: int = 0
    chunked_items: int = 0
    largest: List[Dict[str, Any]] = field(default_factory=list)  # {title, token_size, id}
