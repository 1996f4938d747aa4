import json

import pytest

from snipit.settings import Collection, Settings
from snipit.snippet import Snippet, SnippetRepository


class _StubSettings:
    def __init__(self, settings=None):
        self._settings = settings or Settings()
        self.saved = []

    async def load(self):
        return self._settings

    async def save(self, partial):
        self.saved.append(dict(partial))
        return True


def _make_snippet(snippet_id="123456789", **overrides):
    fields = {
        "id": snippet_id,
        "title": "Read a file",
        "description": "Open and read a text file",
        "code": "with open(path) as fh:\n    data = fh.read()",
        "language": "Python",
        "tags": ["io", "files"],
        "starred": False,
        "date": "2024-01-01T10:00:00+00:00",
    }
    fields.update(overrides)
    return Snippet(**fields)


def _make_repository(settings=None):
    return SnippetRepository(_StubSettings(settings))


@pytest.mark.asyncio
async def test_save_then_get_returns_equal_record(tmp_path):
    repository = _make_repository()
    snippet = _make_snippet()

    assert await repository.save(snippet, tmp_path) is True
    loaded = await repository.get(snippet.id, tmp_path)

    assert loaded == snippet
    assert (tmp_path / "123456789.json").is_file()


@pytest.mark.asyncio
async def test_unknown_keys_survive_a_round_trip(tmp_path):
    record = _make_snippet().to_record()
    record["color"] = "teal"
    (tmp_path / "123456789.json").write_text(json.dumps(record), encoding="utf-8")
    repository = _make_repository()

    loaded = await repository.get("123456789", tmp_path)
    assert loaded is not None
    assert loaded.extras == {"color": "teal"}

    assert await repository.save(loaded, tmp_path)
    written = json.loads((tmp_path / "123456789.json").read_text(encoding="utf-8"))
    assert written["color"] == "teal"
    assert written["title"] == "Read a file"


@pytest.mark.asyncio
async def test_list_skips_corrupt_and_foreign_files(tmp_path):
    repository = _make_repository()
    await repository.save(_make_snippet("111111111"), tmp_path)
    await repository.save(_make_snippet("222222222", title="Second"), tmp_path)
    (tmp_path / "333333333.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "444444444.json").write_text(json.dumps({"id": "444444444"}), encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    snippets = await repository.list(tmp_path)

    assert [snippet.id for snippet in snippets] == ["111111111", "222222222"]
    failed = {entry["file"] for entry in repository.error_handler.get_error_summary()["failed_files"]}
    assert failed == {str(tmp_path / "333333333.json"), str(tmp_path / "444444444.json")}


@pytest.mark.asyncio
async def test_list_missing_directory_is_empty(tmp_path):
    repository = _make_repository()

    assert await repository.list(tmp_path / "missing") == []


@pytest.mark.asyncio
async def test_get_absent_snippet_returns_none(tmp_path):
    repository = _make_repository()

    assert await repository.get("999999999", tmp_path) is None


@pytest.mark.asyncio
async def test_delete_is_idempotent(tmp_path):
    repository = _make_repository()
    snippet = _make_snippet()
    await repository.save(snippet, tmp_path)

    assert await repository.delete(snippet.id, tmp_path) is True
    assert await repository.delete(snippet.id, tmp_path) is True
    assert await repository.get(snippet.id, tmp_path) is None


@pytest.mark.asyncio
async def test_toggle_star_twice_restores_flag(tmp_path):
    repository = _make_repository()
    snippet = _make_snippet()
    await repository.save(snippet, tmp_path)

    assert await repository.toggle_star(snippet.id, tmp_path) is True
    assert (await repository.get(snippet.id, tmp_path)).starred is True

    assert await repository.toggle_star(snippet.id, tmp_path) is True
    assert (await repository.get(snippet.id, tmp_path)).starred is False


@pytest.mark.asyncio
async def test_toggle_star_on_missing_snippet_fails(tmp_path):
    repository = _make_repository()

    assert await repository.toggle_star("404040404", tmp_path) is False


@pytest.mark.asyncio
async def test_save_rejects_missing_path_and_unsafe_ids(tmp_path):
    repository = _make_repository()

    assert await repository.save(_make_snippet()) is False
    assert await repository.save(_make_snippet("../escape"), tmp_path) is False
    assert await repository.save(_make_snippet(".."), tmp_path) is False
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_save_into_missing_directory_reports_failure(tmp_path):
    repository = _make_repository()

    assert await repository.save(_make_snippet(), tmp_path / "missing") is False


@pytest.mark.asyncio
async def test_path_falls_back_to_selected_collection(tmp_path):
    selected_dir = tmp_path / "selected"
    selected_dir.mkdir()
    settings = Settings(
        collection_path=str(tmp_path / "legacy"),
        selected_collection_id="work",
        collections=[Collection(id="work", name="Work", path=str(selected_dir))],
    )
    repository = _make_repository(settings)

    assert await repository.save(_make_snippet())
    assert (selected_dir / "123456789.json").is_file()


@pytest.mark.asyncio
async def test_path_falls_back_to_legacy_collection_path(tmp_path):
    repository = _make_repository(Settings(collection_path=str(tmp_path)))

    assert await repository.save(_make_snippet())
    assert [snippet.id for snippet in await repository.list()] == ["123456789"]


@pytest.mark.asyncio
async def test_allocate_id_skips_existing_files(tmp_path, monkeypatch):
    repository = _make_repository()
    await repository.save(_make_snippet("111111111"), tmp_path)
    candidates = iter(["111111111", "222222222"])
    monkeypatch.setattr("snipit.snippet.repository.generate_snippet_id", lambda: next(candidates))

    assert await repository.allocate_id(tmp_path) == "222222222"


@pytest.mark.asyncio
async def test_allocate_id_gives_up_after_bounded_attempts(tmp_path, monkeypatch):
    repository = _make_repository()
    await repository.save(_make_snippet("111111111"), tmp_path)
    monkeypatch.setattr("snipit.snippet.repository.generate_snippet_id", lambda: "111111111")

    assert await repository.allocate_id(tmp_path) is None


@pytest.mark.asyncio
async def test_create_normalizes_empty_tags(tmp_path):
    repository = _make_repository()

    snippet = await repository.create(title="Hello", code="print('hi')", language="Python", path=tmp_path)

    assert snippet is not None
    assert snippet.tags == ["unlabeled"]
    assert len(snippet.id) == 9 and snippet.id.isdigit()
    assert await repository.get(snippet.id, tmp_path) == snippet


@pytest.mark.asyncio
async def test_update_keeps_identity_and_stamps_last_edited(tmp_path):
    repository = _make_repository()
    original = _make_snippet()
    await repository.save(original, tmp_path)

    updated = await repository.update(original.id, {"title": "Read a whole file", "date": "1999-01-01"}, tmp_path)

    assert updated is not None
    assert updated.title == "Read a whole file"
    assert updated.id == original.id
    assert updated.date == original.date
    assert updated.last_edited is not None
    assert await repository.get(original.id, tmp_path) == updated


@pytest.mark.asyncio
async def test_update_rejects_empty_title(tmp_path):
    repository = _make_repository()
    await repository.save(_make_snippet(), tmp_path)

    assert await repository.update("123456789", {"title": ""}, tmp_path) is None
    assert (await repository.get("123456789", tmp_path)).title == "Read a file"


@pytest.mark.asyncio
async def test_ids_with_null_bytes_fail_quietly(tmp_path):
    repository = _make_repository()

    assert await repository.save(_make_snippet("a\x00b"), tmp_path) is False
    assert await repository.delete("a\x00b", tmp_path) is False
    assert await repository.get("a\x00b", tmp_path) is None
    assert await repository.toggle_star("a\x00b", tmp_path) is False
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_collection_path_with_null_byte_fails_quietly(tmp_path):
    repository = _make_repository()
    broken = f"{tmp_path}/bad\x00dir"

    assert await repository.list(broken) == []
    assert await repository.save(_make_snippet(), broken) is False
    assert await repository.delete("123456789", broken) is False
    assert await repository.create(title="t", code="c", path=broken) is None
