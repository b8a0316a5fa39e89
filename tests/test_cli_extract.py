import json

import pytest
from langchain_core.documents import Document

from wp_ingestion import cli_extract
from wp_ingestion.errors import ServerError


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("WORDPRESS_TOKEN", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("extraction:\n  site_domain: example.com\n")
    return path


def test_cli_writes_documents(config_file, tmp_path, monkeypatch):
    seen = {}

    def fake_extract(config):
        seen["config"] = config
        return [Document(page_content="Hello\n\nWorld", metadata={"id": "1", "type": "event"})]

    monkeypatch.setattr(cli_extract, "extract_all", fake_extract)
    out = tmp_path / "docs.json"

    cli_extract.main(["--config", str(config_file), "--out", str(out), "--modified-after-days", "7"])

    assert json.loads(out.read_text()) == [
        {"pageContent": "Hello\n\nWorld", "metadata": {"id": "1", "type": "event"}}
    ]
    assert seen["config"].extraction.modified_after_days == 7
    assert seen["config"].extraction.include_events is True


def test_cli_fatal_error_exits_with_1(config_file, monkeypatch):
    def failing(config):
        raise ServerError("WordPress server error (502): Bad Gateway. Please try again later")

    monkeypatch.setattr(cli_extract, "extract_all", failing)
    with pytest.raises(SystemExit) as excinfo:
        cli_extract.main(["--config", str(config_file)])
    assert excinfo.value.code == 1


def test_cli_invalid_configuration_exits_with_2(config_file):
    # posts need a token
    with pytest.raises(SystemExit) as excinfo:
        cli_extract.main(["--config", str(config_file), "--posts"])
    assert excinfo.value.code == 2


def test_cli_unexpected_error_exits_with_1(config_file, monkeypatch):
    def failing(config):
        raise TypeError("'NoneType' object is not subscriptable")

    monkeypatch.setattr(cli_extract, "extract_all", failing)
    with pytest.raises(SystemExit) as excinfo:
        cli_extract.main(["--config", str(config_file)])
    assert excinfo.value.code == 1
