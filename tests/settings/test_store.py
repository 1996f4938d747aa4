import json

import pytest

from snipit.settings import Settings, SettingsStore


@pytest.mark.asyncio
async def test_first_load_creates_document_with_defaults(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(path, os_name="Linux 6.1")

    settings = await store.load()

    assert path.is_file()
    written = json.loads(path.read_text(encoding="utf-8"))
    assert written["collectionPath"] is None
    assert written["os"] == "Linux 6.1"
    assert "firstStartup" in written
    assert settings.collection_path is None
    assert settings.theme == "system"


@pytest.mark.asyncio
async def test_save_merges_and_keeps_unknown_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"collectionPath": "/data", "experimental": {"beta": True}}), encoding="utf-8")
    store = SettingsStore(path)

    assert await store.save({"theme": "dark"}) is True

    raw = await store.load_raw()
    assert raw == {"collectionPath": "/data", "experimental": {"beta": True}, "theme": "dark"}
    settings = await store.load()
    assert settings.theme == "dark"
    assert settings.model_extra == {"experimental": {"beta": True}}


@pytest.mark.asyncio
async def test_corrupt_document_loads_as_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    settings = await SettingsStore(path).load()

    assert settings == Settings(collection_path=None)


@pytest.mark.asyncio
async def test_unreadable_location_reports_save_failure(tmp_path):
    path = tmp_path / "settings.json"
    path.mkdir()

    assert await SettingsStore(path).save({"theme": "dark"}) is False


@pytest.mark.asyncio
async def test_invalid_theme_falls_back_to_system(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "neon"}), encoding="utf-8")
    store = SettingsStore(path)

    assert (await store.load()).theme == "system"
    assert await store.update_theme("neon") is False
    assert await store.update_theme("light") is True
    assert (await store.load()).theme == "light"


@pytest.mark.asyncio
async def test_update_model_persists_choice(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")

    assert await store.update_model("claude-haiku-4-5")
    assert (await store.load()).model == "claude-haiku-4-5"


@pytest.mark.asyncio
async def test_mistyped_text_keys_are_ignored_one_by_one(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "collectionPath": ["not", "a", "path"],
                "os": "Linux 6.1",
                "model": {"provider": "ollama"},
                "theme": "dark",
                "collections": [{"id": "work", "name": "Work", "path": "/data/work"}],
            }
        ),
        encoding="utf-8",
    )

    settings = await SettingsStore(path).load()

    assert settings.collection_path is None
    assert settings.model is None
    assert settings.os == "Linux 6.1"
    assert settings.theme == "dark"
    assert [collection.id for collection in settings.collections] == ["work"]


@pytest.mark.asyncio
async def test_save_leaves_corrupt_document_alone(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert await SettingsStore(path).save({"theme": "dark"}) is False
    assert path.read_text(encoding="utf-8") == "[1, 2, 3]"
