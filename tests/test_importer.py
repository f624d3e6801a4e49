import pytest

from octoform.core.errors import MalformedIdentifier, RemoteNotFound
from octoform.core.values import Configuration
from octoform.providers.importer import ImportResolver
from octoform.providers.reconciler import Reconciler


@pytest.mark.asyncio
async def test_import_matches_create_then_read(remote):
    config = Configuration.from_dict({"group": "eng", "name": "alpha", "label": "hi"})
    created = await Reconciler(remote).apply(config)

    imported = await ImportResolver(remote).resolve("eng:alpha")

    assert imported == created.state


@pytest.mark.asyncio
async def test_mixed_case_import_matches_create(remote):
    created = await Reconciler(remote).apply(
        Configuration.from_dict({"group": "eng", "name": "Alpha", "label": " hi "})
    )

    imported = await ImportResolver(remote).resolve("eng:Alpha")

    assert imported.resource_id == "eng:alpha"
    assert imported == created.state
    assert remote.calls[-1] == ("get", "eng:alpha")


@pytest.mark.asyncio
async def test_imported_state_plans_no_changes(remote):
    remote.entities["eng:alpha"] = {
        "group": "eng",
        "name": "alpha",
        "size": 2,
        "label": "  hi ",
        "revision": 4,
    }

    state = await ImportResolver(remote).resolve("eng:alpha")
    config = Configuration.from_dict({"group": "eng", "name": "alpha", "size": 2, "label": "hi"})

    assert state.get("label") == "hi"
    assert state.get("token") is None
    assert Reconciler(remote).plan(config, state).action == "noop"


@pytest.mark.asyncio
async def test_last_part_keeps_separators(remote):
    remote.entities["eng:a:b"] = {"group": "eng", "name": "a:b", "size": 1, "revision": 1}

    state = await ImportResolver(remote).resolve("eng:a:b")

    assert state.resource_id == "eng:a:b"
    assert state.get("name") == "a:b"


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["eng", ":alpha", "eng:", ""])
async def test_malformed_identifier(remote, identifier):
    with pytest.raises(MalformedIdentifier) as exc_info:
        await ImportResolver(remote).resolve(identifier)

    assert exc_info.value.details["resource_type"] == "test_widget"
    assert remote.calls == []


@pytest.mark.asyncio
async def test_missing_entity(remote):
    with pytest.raises(RemoteNotFound) as exc_info:
        await ImportResolver(remote).resolve("eng:ghost")

    assert exc_info.value.resource_id == "eng:ghost"
