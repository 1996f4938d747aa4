import pytest
from fastapi import HTTPException

from snipit.agent import MetadataFailure, MetadataFailureReason, SnippetMetadata
from snipit.api.model import (
    CollectionCreateRequest,
    MetadataRequest,
    SettingsUpdateRequest,
    SnippetCreateRequest,
    SnippetUpdateRequest,
)
from snipit.api.route import get_repository
from snipit.api.service import (
    add_collection_service,
    complete_metadata_service,
    create_snippet_service,
    delete_snippet_service,
    get_snippet_service,
    list_snippets_service,
    select_collection_service,
    toggle_star_service,
    update_settings_service,
    update_snippet_service,
)
from snipit.settings import Collection, CollectionRegistry, SettingsStore
from snipit.snippet import SnippetRepository


class _StubCompleter:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def complete(self, code, model_hint=None, **fields):
        self.calls.append({"code": code, "model": model_hint, **fields})
        return self.result


async def _make_services(tmp_path, *, register=True):
    store = SettingsStore(tmp_path / "settings.json")
    registry = CollectionRegistry(store)
    repository = SnippetRepository(store)
    if register:
        collection_dir = tmp_path / "work"
        collection_dir.mkdir()
        await registry.add(Collection(id="work", name="Work", path=str(collection_dir)))
        await registry.select("work")
    return store, registry, repository


@pytest.mark.asyncio
async def test_create_then_list_with_query_and_facets(tmp_path):
    _, registry, repository = await _make_services(tmp_path)

    await create_snippet_service(
        SnippetCreateRequest(title="Read JSON", code="json.load(fh)", language="Python", tags=["io"]),
        repository,
        registry,
    )
    created = await create_snippet_service(
        SnippetCreateRequest(title="Spawn goroutine", code="go run()", language="Go"),
        repository,
        registry,
    )

    assert created.tags == ["unlabeled"]

    listing = await list_snippets_service(repository, registry, query="content:json")
    assert [result.title for result in listing.results] == ["Read JSON"]
    assert listing.total == 2
    assert sorted(listing.languages) == ["Go", "Python"]
    assert set(listing.top_tags) == {"io", "unlabeled"}


@pytest.mark.asyncio
async def test_create_validates_required_fields(tmp_path):
    _, registry, repository = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await create_snippet_service(SnippetCreateRequest(title="", code="x"), repository, registry)

    assert excinfo.value.status_code == 422
    assert excinfo.value.detail["reason"] == "missing_title"


@pytest.mark.asyncio
async def test_create_without_any_collection_is_rejected(tmp_path):
    _, registry, repository = await _make_services(tmp_path, register=False)

    with pytest.raises(HTTPException) as excinfo:
        await create_snippet_service(SnippetCreateRequest(title="t", code="x"), repository, registry)

    assert excinfo.value.status_code == 422
    assert excinfo.value.detail["reason"] == "no_collection"


@pytest.mark.asyncio
async def test_unknown_collection_is_not_found(tmp_path):
    _, registry, repository = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await list_snippets_service(repository, registry, collection_id="missing")

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_update_star_and_delete_flow(tmp_path):
    _, registry, repository = await _make_services(tmp_path)
    created = await create_snippet_service(
        SnippetCreateRequest(title="Old", code="x = 1"), repository, registry
    )

    updated = await update_snippet_service(
        created.id, SnippetUpdateRequest(title="New"), repository, registry
    )
    assert updated.title == "New"
    assert updated.code == "x = 1"
    assert updated.date == created.date
    assert updated.last_edited is not None

    starred = await toggle_star_service(created.id, repository, registry)
    assert starred.starred is True

    await delete_snippet_service(created.id, repository, registry)
    await delete_snippet_service(created.id, repository, registry)
    with pytest.raises(HTTPException) as excinfo:
        await get_snippet_service(created.id, repository, registry)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_update_missing_snippet_is_not_found(tmp_path):
    _, registry, repository = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await update_snippet_service("123456789", SnippetUpdateRequest(starred=True), repository, registry)

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_collection_path_conflicts(tmp_path):
    _, registry, _ = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await add_collection_service(
            CollectionCreateRequest(name="Again", path=str(tmp_path / "work")), registry
        )

    assert excinfo.value.status_code == 409
    with pytest.raises(HTTPException) as excinfo:
        await select_collection_service("missing", registry)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_settings_update_rejects_unknown_theme(tmp_path):
    store, _, _ = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await update_settings_service(SettingsUpdateRequest(theme="neon"), store)
    assert excinfo.value.status_code == 422

    settings = await update_settings_service(SettingsUpdateRequest(theme="dark", model="m-1"), store)
    assert settings.theme == "dark"
    assert settings.model == "m-1"
    assert settings.selected_collection_id == "work"


@pytest.mark.asyncio
async def test_metadata_uses_saved_model_choice(tmp_path):
    store, _, _ = await _make_services(tmp_path)
    await store.update_model("m-saved")
    completer = _StubCompleter(
        SnippetMetadata(title="t", description="d", code_language="Python", tags="b,a")
    )

    response = await complete_metadata_service(MetadataRequest(code="print(1)"), completer, store)

    assert response.tags == ["a", "b"]
    assert completer.calls[0]["model"] == "m-saved"


@pytest.mark.asyncio
async def test_metadata_failures_map_to_status_codes(tmp_path):
    store, _, _ = await _make_services(tmp_path)

    empty = _StubCompleter(MetadataFailure(MetadataFailureReason.EMPTY_CODE, "Snippet code is empty."))
    with pytest.raises(HTTPException) as excinfo:
        await complete_metadata_service(MetadataRequest(code=""), empty, store)
    assert excinfo.value.status_code == 422

    timeout = _StubCompleter(MetadataFailure(MetadataFailureReason.TIMEOUT, "No answer within 1s."))
    with pytest.raises(HTTPException) as excinfo:
        await complete_metadata_service(MetadataRequest(code="x"), timeout, store)
    assert excinfo.value.status_code == 502
    assert excinfo.value.detail == {"reason": "timeout", "message": "No answer within 1s."}


@pytest.mark.asyncio
async def test_listing_reports_skipped_files_per_request(tmp_path):
    store, registry, _ = await _make_services(tmp_path)
    (tmp_path / "work" / "999999999.json").write_text("{broken", encoding="utf-8")

    first = get_repository(store)
    second = get_repository(store)
    assert first.error_handler is not second.error_handler

    listing = await list_snippets_service(first, registry)
    assert listing.skipped == 1
    assert listing.total == 0

    assert (await list_snippets_service(second, registry)).skipped == 1
    assert first.error_handler.get_error_summary()["total_errors"] == 1


@pytest.mark.asyncio
async def test_null_byte_snippet_id_fails_cleanly(tmp_path):
    _, registry, repository = await _make_services(tmp_path)

    with pytest.raises(HTTPException) as excinfo:
        await delete_snippet_service("a\x00b", repository, registry)
    assert excinfo.value.status_code == 500

    with pytest.raises(HTTPException) as excinfo:
        await get_snippet_service("a\x00b", repository, registry)
    assert excinfo.value.status_code == 404
