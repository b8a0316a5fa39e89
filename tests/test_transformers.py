from common.config import ChunkingConfig
from wp_ingestion.cleaners import html_to_markdown
from wp_ingestion.transformers import transform_event, transform_post


def test_small_post_becomes_single_document():
    post = {
        "ID": 42,
        "site_ID": 7,
        "title": "Hello",
        "URL": "https://example.com/hello",
        "content": "<p>World</p>",
        "date": "2024-01-01T00:00:00+00:00",
        "modified": "2024-02-01T00:00:00+00:00",
    }
    docs = transform_post(post, ChunkingConfig())

    assert len(docs) == 1
    doc = docs[0]
    assert doc.is_chunked is False
    assert doc.document.page_content == "Hello\n\nWorld"
    assert doc.document.metadata == {
        "id": "742",
        "url": "https://example.com/hello",
        "title": "Hello",
        "type": "post",
        "createdDate": "2024-01-01T00:00:00+00:00",
        "modifiedDate": "2024-02-01T00:00:00+00:00",
    }
    assert "chunkedId" not in doc.document.metadata
    assert doc.token_size == 3  # 12 chars / 4


def test_missing_title_falls_back_to_default():
    docs = transform_post({"ID": 1, "content": ""}, ChunkingConfig(), content_type="page")
    assert docs[0].document.page_content == "Untitled\n\n"
    assert docs[0].document.metadata["type"] == "page"
    assert docs[0].document.metadata["url"] == ""


def test_resolver_runs_before_markdown_conversion():
    calls = []

    def resolve(content, own_id):
        calls.append((content, own_id))
        return content.replace("<!-- wp:block {\"ref\":9} /-->", "<p>Inlined</p>")

    post = {"ID": 3, "title": "T", "content": '<p>A</p><!-- wp:block {"ref":9} /-->'}
    docs = transform_post(post, ChunkingConfig(), resolve=resolve)

    assert calls == [('<p>A</p><!-- wp:block {"ref":9} /-->', 3)]
    assert docs[0].document.page_content == "T\n\nA\n\nInlined"


def test_large_post_is_chunked_with_stable_id():
    chunking = ChunkingConfig(max_tokens=10, chunk_size=10, overlap=2, chars_per_token=4)
    post = {"ID": 5, "site_ID": 1, "title": "Big", "content": "<p>" + "x" * 90 + "</p>"}
    docs = transform_post(post, chunking)

    # "Big\n\n" + 90 chars = 95 chars; windows of 40 stepping by 32
    assert len(docs) == 3
    assert all(d.is_chunked for d in docs)
    assert [d.document.metadata["id"] for d in docs] == ["15", "15", "15"]
    assert [d.document.metadata["chunkedId"] for d in docs] == ["15-1", "15-2", "15-3"]
    assert [d.chunk_index for d in docs] == [1, 2, 3]
    assert {d.total_chunks for d in docs} == {3}
    assert docs[0].document.page_content.startswith("Big\n\n")


def test_document_exactly_at_threshold_is_not_chunked():
    chunking = ChunkingConfig(max_tokens=2, chunk_size=2, overlap=1, chars_per_token=4)
    # "ab\n\n" + "cdef" = 8 chars = 2 tokens
    docs = transform_post({"ID": 1, "title": "ab", "content": "cdef"}, chunking)
    assert len(docs) == 1
    assert docs[0].is_chunked is False


def test_event_metadata():
    event = {
        "id": 77,
        "title": "Concert",
        "description": "<p>Live <strong>music</strong></p>",
        "url": "https://example.com/event/concert",
        "date": "2024-03-01 10:00:00",
        "modified": "2024-03-02 10:00:00",
        "venue": {"id": 11, "venue": "Hall"},
        "organizer": [{"id": 21, "organizer": "Ann"}, {"id": 22, "organizer": "Bob"}],
        "start_date": "2024-04-01 19:00:00",
        "end_date": "2024-04-01 22:00:00",
        "cost": "$10",
        "categories": [{"id": 1, "name": "Music"}, {"id": 2, "name": ""}, {"name": "Jazz"}],
    }
    docs = transform_event(event, ChunkingConfig())

    assert len(docs) == 1
    meta = docs[0].document.metadata
    assert docs[0].document.page_content == "Concert\n\nLive **music**"
    assert meta["id"] == "77"
    assert meta["type"] == "event"
    assert meta["venueId"] == 11
    assert meta["organizerId"] == 21
    assert meta["startDate"] == "2024-04-01 19:00:00"
    assert meta["endDate"] == "2024-04-01 22:00:00"
    assert meta["cost"] == "$10"
    assert meta["categories"] == ["Music", "Jazz"]
    assert meta["categoryIDs"] == [1, 2]


def test_event_with_sparse_fields():
    docs = transform_event({"id": 8, "link": "https://example.com/e/8"}, ChunkingConfig())
    meta = docs[0].document.metadata
    assert meta["url"] == "https://example.com/e/8"
    assert meta["title"] == "Untitled"
    assert meta["venueId"] is None
    assert meta["organizerId"] is None
    assert meta["cost"] is None
    assert meta["categories"] == []
    assert meta["categoryIDs"] == []


def test_html_to_markdown_drops_comments_and_scripts():
    html = '<!-- wp:paragraph --><p>Keep   me</p><!-- /wp:paragraph --><script>x()</script>'
    assert html_to_markdown(html) == "Keep me"


def test_html_to_markdown_passes_through_empty_input():
    assert html_to_markdown("") == ""
