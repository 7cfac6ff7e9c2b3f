"""Tests for the in-memory datastore."""

import pytest

from pipeline_models.datastore import InMemoryDatastore, Pagination
from pipeline_models.errors import DuplicateRecordError


class TestSave:
    @pytest.mark.asyncio
    async def test_assigns_id(self, datastore):
        stored = await datastore.save("templates", {"name": "a", "version": "1.0.0"})
        assert stored["id"]
        assert stored["name"] == "a"

    @pytest.mark.asyncio
    async def test_keeps_given_id(self, datastore):
        stored = await datastore.save("tokens", {"id": "fixed", "hash": "h"})
        assert stored["id"] == "fixed"

    @pytest.mark.asyncio
    async def test_overwrite_same_id(self, datastore):
        await datastore.save("tokens", {"id": "t1", "hash": "h1"})
        await datastore.save("tokens", {"id": "t1", "hash": "h2"})
        assert await datastore.get("tokens", "t1") == {"id": "t1", "hash": "h2"}
        assert len(await datastore.scan("tokens")) == 1

    @pytest.mark.asyncio
    async def test_duplicate_template_version(self, datastore):
        await datastore.save("templates", {"name": "a", "version": "1.0.0"})
        with pytest.raises(DuplicateRecordError) as exc_info:
            await datastore.save("templates", {"name": "a", "version": "1.0.0"})
        assert exc_info.value.table == "templates"
        assert exc_info.value.key == {"name": "a", "version": "1.0.0"}

    @pytest.mark.asyncio
    async def test_same_version_different_name_allowed(self, datastore):
        await datastore.save("templates", {"name": "a", "version": "1.0.0"})
        await datastore.save("templates", {"name": "b", "version": "1.0.0"})
        assert len(await datastore.scan("templates")) == 2

    @pytest.mark.asyncio
    async def test_duplicate_token_hash(self, datastore):
        await datastore.save("tokens", {"hash": "same"})
        with pytest.raises(DuplicateRecordError):
            await datastore.save("tokens", {"hash": "same"})

    @pytest.mark.asyncio
    async def test_custom_unique_keys(self):
        store = InMemoryDatastore(unique_keys={})
        await store.save("templates", {"name": "a", "version": "1.0.0"})
        await store.save("templates", {"name": "a", "version": "1.0.0"})
        assert len(await store.scan("templates")) == 2

    @pytest.mark.asyncio
    async def test_records_are_copies(self, datastore):
        record = {"name": "a", "version": "1.0.0", "labels": ["x"]}
        stored = await datastore.save("templates", record)
        record["labels"].append("mutated")
        stored["labels"].append("mutated")
        fetched = await datastore.get("templates", stored["id"])
        assert fetched["labels"] == ["x"]


class TestGet:
    @pytest.mark.asyncio
    async def test_missing_id(self, datastore):
        assert await datastore.get("templates", "nope") is None

    @pytest.mark.asyncio
    async def test_by_filter(self, datastore):
        await datastore.save("tokens", {"hash": "h1", "user_id": "u1"})
        await datastore.save("tokens", {"hash": "h2", "user_id": "u1"})
        found = await datastore.get("tokens", {"hash": "h2"})
        assert found["hash"] == "h2"

    @pytest.mark.asyncio
    async def test_filter_no_match(self, datastore):
        await datastore.save("tokens", {"hash": "h1"})
        assert await datastore.get("tokens", {"hash": "other"}) is None

    @pytest.mark.asyncio
    async def test_filter_missing_field_no_match(self, datastore):
        await datastore.save("tokens", {"hash": "h1"})
        assert await datastore.get("tokens", {"user_id": None}) is None


class TestScan:
    @pytest.mark.asyncio
    async def test_params(self, datastore):
        await datastore.save("templates", {"name": "a", "version": "1.0.0"})
        await datastore.save("templates", {"name": "a", "version": "1.0.1"})
        await datastore.save("templates", {"name": "b", "version": "1.0.0"})
        rows = await datastore.scan("templates", params={"name": "a"})
        assert {r["version"] for r in rows} == {"1.0.0", "1.0.1"}

    @pytest.mark.asyncio
    async def test_empty_table(self, datastore):
        assert await datastore.scan("templates") == []

    @pytest.mark.asyncio
    async def test_pagination(self, datastore):
        for i in range(5):
            await datastore.save("templates", {"name": "a", "version": f"1.0.{i}"})
        page1 = await datastore.scan("templates", paginate=Pagination(page=1, count=2))
        page3 = await datastore.scan("templates", paginate=Pagination(page=3, count=2))
        assert [r["version"] for r in page1] == ["1.0.0", "1.0.1"]
        assert [r["version"] for r in page3] == ["1.0.4"]


class TestPagination:
    def test_offset(self):
        assert Pagination(page=3, count=10).offset == 20

    def test_invalid(self):
        with pytest.raises(ValueError):
            Pagination(page=0, count=10)
        with pytest.raises(ValueError):
            Pagination(page=1, count=0)
