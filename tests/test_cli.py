"""Test the archive command-line front end."""
import pytest
from content_archive.models.document import Document, DocumentKind
from content_archive.persistence.retention_store import RetentionStore
from content_archive.scripts.archive import main


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    store = RetentionStore(data_dir=tmp_path / "data")
    store.save(Document(
        id="1700000000000_examplecom_MyPost",
        kind=DocumentKind.WEBPAGE,
        title="My Post",
        source_url="https://example.com/blog/My-Post",
        source_ref="example.com",
        created_at=1700000000000,
        body="# My Post\n\nHello.",
    ))
    return tmp_path / "data"


def test_list(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "list"]) == 0
    out = capsys.readouterr().out
    assert "1700000000000_examplecom_MyPost.md" in out
    assert "My Post" in out


def test_show(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "show", "1700000000000_examplecom_MyPost.md"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("# My Post")
    assert "url: https://example.com/blog/My-Post" in out
    assert "Hello." in out


def test_delete_then_show_fails(data_dir, capsys):
    key = "1700000000000_examplecom_MyPost.md"
    assert main(["--data-dir", str(data_dir), "delete", key]) == 0
    assert main(["--data-dir", str(data_dir), "show", key]) == 1
    assert "not found" in capsys.readouterr().err.lower()


def test_ingest_invalid_url_exits_nonzero(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "ingest", "not-a-url"]) == 1
    assert "Error" in capsys.readouterr().err


def test_prune(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "prune"]) == 0
    assert "Evicted 0" in capsys.readouterr().out
