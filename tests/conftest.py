from typing import Any, Callable, Dict, List, Optional

import pytest

from common.config import ChunkingConfig, ExtractionConfig, GlobalYAMLConfig
from wp_ingestion.http_client import HttpResponse


class FakeHttp:
    """Stands in for `http_get`; `handler(url, params)` returns (status, body)."""

    def __init__(self, handler: Callable[[str, Dict[str, Any]], Any]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url, headers=None, params=None, timeout=20, max_retries=3):
        params = dict(params or {})
        self.calls.append({"url": url, "headers": dict(headers or {}), "params": params})
        result = self.handler(url, params)
        if isinstance(result, Exception):
            raise result
        status, body = result
        return HttpResponse(status=status, reason="Reason", url=url, body=body)

    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


@pytest.fixture
def fake_http():
    return FakeHttp


@pytest.fixture
def make_config():
    def _make(chunking: Optional[Dict[str, Any]] = None, **extraction: Any) -> GlobalYAMLConfig:
        fields = {"site_id": 123, "site_domain": "example.com", "token": "secret"}
        fields.update(extraction)
        return GlobalYAMLConfig(
            extraction=ExtractionConfig(**fields),
            chunking=ChunkingConfig(**(chunking or {})),
        )

    return _make
