"""
Tests for the cluster_config table backend.

These cover the structural rules of the table (fixed rows, no insert, no
delete) and the end-to-end behaviour of the `auth` row through the table.
"""

import asyncio
import json
import threading
from types import MappingProxyType
from unittest.mock import AsyncMock

import pytest

from clusterconfig.modules.documents import AuthDocument
from clusterconfig.modules.errors import OperationInterrupted
from clusterconfig.modules.metadata import MAX_SECRET_LENGTH, run_on_home
from clusterconfig.modules.table import DELETE_ERROR, INSERT_ERROR, ConfigTable


def test_primary_key_name(table):
    assert table.get_primary_key_name() == "id"


def test_build_registers_auth_document(table, shared_view):
    assert list(table.documents) == ["auth"]
    assert isinstance(table.documents["auth"], AuthDocument)
    assert table.documents["auth"].view is shared_view


def test_documents_cannot_be_changed(table):
    assert isinstance(table.documents, MappingProxyType)
    with pytest.raises(TypeError):
        table.documents["other"] = table.documents["auth"]


def test_documents_copied_at_construction():
    documents = {"auth": AsyncMock()}
    table = ConfigTable(documents)

    documents["other"] = AsyncMock()

    assert list(table.documents) == ["auth"]


@pytest.mark.asyncio
async def test_read_all_primary_keys(table):
    assert await table.read_all_primary_keys() == ["auth"]


@pytest.mark.asyncio
async def test_read_all_primary_keys_sorted():
    table = ConfigTable({"b": AsyncMock(), "auth": AsyncMock(), "a": AsyncMock()})

    assert await table.read_all_primary_keys() == ["a", "auth", "b"]


@pytest.mark.asyncio
async def test_read_auth_row(table):
    assert await table.read_row("auth") == {"id": "auth", "auth_key": None}


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["missing", "", "AUTH", "auth "])
async def test_read_unknown_key(table, key):
    assert await table.read_row(key) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, 1, True, ["auth"], {"id": "auth"}])
async def test_read_non_string_key(table, key):
    assert await table.read_row(key) is None


@pytest.mark.asyncio
async def test_read_delegates_verbatim():
    document = AsyncMock()
    document.read.return_value = {"id": "doc", "value": [1, 2]}
    table = ConfigTable({"doc": document})
    interruptor = threading.Event()

    row = await table.read_row("doc", interruptor)

    assert row == {"id": "doc", "value": [1, 2]}
    document.read.assert_awaited_once_with(interruptor)


@pytest.mark.asyncio
async def test_read_all_rows(table):
    await table.write_row("auth", {"id": "auth", "auth_key": "k"})

    assert await table.read_all_rows() == [{"id": "auth", "auth_key": {"hidden": True}}]


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["missing", "", "AUTH"])
async def test_write_unknown_key_is_insert(table, key):
    ok, error = await table.write_row(key, {"id": key, "auth_key": None})

    assert ok is False
    assert error == INSERT_ERROR
    assert error == "It's illegal to insert new rows into the `rethinkdb.cluster_config` table."
    assert await table.read_row(key) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, 3, 2.5, ["auth"]])
async def test_write_non_string_key_is_insert(table, key):
    ok, error = await table.write_row(key, {"id": key, "auth_key": None})

    assert (ok, error) == (False, INSERT_ERROR)


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["auth", "missing", 5])
async def test_delete_rejected(table, key):
    ok, error = await table.write_row(key, None)

    assert ok is False
    assert error == DELETE_ERROR
    assert error == "It's illegal to delete rows from the `rethinkdb.cluster_config` table."


@pytest.mark.asyncio
async def test_delete_leaves_row(table):
    await table.write_row("auth", {"id": "auth", "auth_key": "k"})

    await table.write_row("auth", None)

    assert (await table.read_row("auth"))["auth_key"] == {"hidden": True}


@pytest.mark.asyncio
async def test_write_null_key(table):
    ok, error = await table.write_row("auth", {"id": "auth", "auth_key": None})

    assert (ok, error) == (True, None)
    assert await table.read_row("auth") == {"id": "auth", "auth_key": None}


@pytest.mark.asyncio
async def test_write_secret_is_never_read_back(table):
    ok, error = await table.write_row("auth", {"id": "auth", "auth_key": "s3cret"})

    assert (ok, error) == (True, None)
    row = await table.read_row("auth")
    assert row == {"id": "auth", "auth_key": {"hidden": True}}
    assert "s3cret" not in json.dumps(row)
    assert "s3cret" not in json.dumps(await table.read_all_rows())


@pytest.mark.asyncio
async def test_write_secret_too_long(table):
    ok, error = await table.write_row(
        "auth", {"id": "auth", "auth_key": "x" * (MAX_SECRET_LENGTH + 1)}
    )

    assert ok is False
    assert str(MAX_SECRET_LENGTH) in error
    assert str(MAX_SECRET_LENGTH + 1) in error


@pytest.mark.asyncio
async def test_write_placeholder_rejected(table):
    ok, error = await table.write_row("auth", {"id": "auth", "auth_key": {"hidden": True}})

    assert ok is False
    assert "place-holder" in error


@pytest.mark.asyncio
async def test_write_extra_key_rejected(table):
    ok, error = await table.write_row("auth", {"id": "auth", "auth_key": None, "extra": 1})

    assert ok is False
    assert "Unexpected key(s) `extra`" in error
    assert "rethinkdb.cluster_config" in error


@pytest.mark.asyncio
async def test_write_same_secret_twice(table):
    """Repeating a write gives the same read result."""
    await table.write_row("auth", {"id": "auth", "auth_key": "s3cret"})
    first = await table.read_row("auth")

    await table.write_row("auth", {"id": "auth", "auth_key": "s3cret"})
    second = await table.read_row("auth")

    assert first == second == {"id": "auth", "auth_key": {"hidden": True}}


@pytest.mark.asyncio
async def test_write_interrupted(table, shared_view):
    interruptor = threading.Event()
    interruptor.set()

    with pytest.raises(OperationInterrupted):
        await table.write_row("auth", {"id": "auth", "auth_key": "k"}, interruptor)

    assert not (await run_on_home(shared_view.home_loop, shared_view.get)).auth_key.value.is_set


@pytest.mark.asyncio
async def test_concurrent_writes_all_merged(table, shared_view):
    """Every concurrent writer goes through its own fetch-modify-join."""
    results = await asyncio.gather(
        *(table.write_row("auth", {"id": "auth", "auth_key": f"key-{i}"}) for i in range(20))
    )

    assert all(ok for ok, _ in results)
    final = await run_on_home(shared_view.home_loop, lambda: shared_view.get().auth_key.value)
    assert final.value.decode() in {f"key-{i}" for i in range(20)}


def test_writes_from_independent_threads(table, shared_view):
    """Callers on their own event loops all reach the same shared view."""
    errors = []

    def writer(i):
        try:
            ok, error = asyncio.run(
                table.write_row("auth", {"id": "auth", "auth_key": f"thread-{i}"})
            )
            if not ok:
                errors.append(error)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert asyncio.run(table.read_row("auth")) == {"id": "auth", "auth_key": {"hidden": True}}
