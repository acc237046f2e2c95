from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from recordcollector.contracts.schema import (
    DefaultSource,
    NamespaceDetails,
    ParamDescriptor,
    ValueSpec,
)
from recordcollector.core.collector import RecordCollector, sort_records
from recordcollector.core.config import settings
from recordcollector.core.errors import (
    DeadlineExceededError,
    SortError,
    UnknownClientError,
    UnknownSchemaError,
)
from recordcollector.core.schemas.config import cursor_constructor
from recordcollector.core.schemas.registry import SchemaRegistry
from tests.helpers.fakes import NO_WAIT, FakeRemote, fake_clients, make_schema

ACCOUNTS = make_schema("Accounts")
INSTANCES = make_schema(
    "Instances",
    required_params={
        "region": ParamDescriptor(max=1),
        "accountId": ParamDescriptor(max=1, default_source=DefaultSource(schema=ACCOUNTS)),
    },
)


def collector_for(remote, schemas=None, **kwargs):
    return RecordCollector(
        fake_clients(remote), schemas=schemas, retry_policy=NO_WAIT, default_timeout=None, **kwargs
    )


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_instances_fan_out_over_resolved_accounts(self):
        running = {"now": 0, "peak": 0}

        async def handler(method, params):
            if method == "listAccounts":
                return {"Items": ["111", "222"]}
            running["now"] += 1
            running["peak"] = max(running["peak"], running["now"])
            await asyncio.sleep(0.01)
            running["now"] -= 1
            return {"Items": [{"InstanceId": f"i-{params['accountId']}", **params}]}

        remote = FakeRemote(handler)

        records = await collector_for(remote).lookup_records(INSTANCES, {"region": "us-east-1"})

        assert remote.calls_to("listInstances") == [
            {"region": "us-east-1", "accountId": "111"},
            {"region": "us-east-1", "accountId": "222"},
        ]
        assert running["peak"] == 2
        assert [r["InstanceId"] for r in records] == ["i-111", "i-222"]

    @pytest.mark.asyncio
    async def test_paginated_list_call(self):
        def handler(method, params):
            if "Cursor" not in params:
                return {"Items": [1, 2], "Incomplete": True, "Next": "c-1"}
            return {"Items": [3], "Incomplete": False}

        schema = make_schema(
            incomplete_indicator="Incomplete",
            next_batch_param_constructor=cursor_constructor("Next", "Cursor"),
        )
        remote = FakeRemote(handler)

        records = await collector_for(remote).lookup_records(schema, {"Limit": 2})

        assert records == [1, 2, 3]
        assert remote.calls == [
            ("listItems", {"Limit": 2}),
            ("listItems", {"Limit": 2, "Cursor": "c-1"}),
        ]


class TestSorting:
    @pytest.mark.asyncio
    async def test_sort_by_field(self):
        schema = make_schema(
            required_params={"id": ParamDescriptor(max=1)},
            value=ValueSpec(path="Items", sort_by="LaunchTime"),
        )
        remote = FakeRemote(
            lambda method, params: {
                "Items": [{"LaunchTime": t, "id": params["id"]} for t in ([5, 1] if params["id"] == "a" else [3, 1])]
            }
        )

        records = await collector_for(remote).lookup_records(schema, {"id": ["a", "b"]})

        times = [r["LaunchTime"] for r in records]
        assert times == sorted(times)
        # stable: equal keys keep merge order
        assert [r["id"] for r in records if r["LaunchTime"] == 1] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_unsorted_keeps_param_set_then_page_order(self):
        def handler(method, params):
            if "NextToken" not in params:
                return {"Items": [f"{params['id']}-p1"], "NextToken": "t"}
            return {"Items": [f"{params['id']}-p2"]}

        schema = make_schema(required_params={"id": ParamDescriptor(max=1)})

        records = await collector_for(FakeRemote(handler)).lookup_records(schema, {"id": ["b", "a"]})

        assert records == ["b-p1", "b-p2", "a-p1", "a-p2"]

    def test_sort_by_callable(self):
        assert sort_records([3, 1, 2], lambda r: -r) == [3, 2, 1]

    def test_missing_sort_keys_go_last(self):
        records = [{"k": 2}, {}, {"k": 1}]
        assert sort_records(records, "k") == [{"k": 1}, {"k": 2}, {}]

    def test_no_sort(self):
        assert sort_records([3, 1], None) == [3, 1]

    def test_incomparable_keys_raise_sort_error(self):
        with pytest.raises(SortError) as info:
            sort_records([{"id": 2}, {"id": "a"}], "id", schema="Items")

        assert info.value.schema == "Items"
        assert info.value.sort_by == "id"
        assert isinstance(info.value.cause, TypeError)

    @pytest.mark.asyncio
    async def test_lookup_with_incomparable_keys(self):
        schema = make_schema(value=ValueSpec(path="Items", sort_by="id"))
        remote = FakeRemote(lambda method, params: {"Items": [{"id": 2}, {"id": "a"}]})

        with pytest.raises(SortError, match="Items"):
            await collector_for(remote).lookup_records(schema)


class TestLookupRecords:
    @pytest.mark.asyncio
    async def test_schema_by_name(self):
        registry = SchemaRegistry()
        registry.register(ACCOUNTS)
        remote = FakeRemote(lambda method, params: {"Items": ["1"]})

        assert await collector_for(remote, registry).lookup_records("Accounts") == ["1"]

    @pytest.mark.asyncio
    async def test_unknown_schema_name(self):
        with pytest.raises(UnknownSchemaError):
            await collector_for(FakeRemote()).lookup_records("Nope")

    @pytest.mark.asyncio
    async def test_schema_must_be_defined(self):
        with pytest.raises(ValueError, match="schema must be defined"):
            await collector_for(FakeRemote()).lookup_records(None)

    @pytest.mark.asyncio
    async def test_timeout_bounds_a_hanging_dependency(self):
        async def handler(method, params):
            await asyncio.sleep(10)

        collector = collector_for(FakeRemote(handler))

        with pytest.raises(DeadlineExceededError):
            await collector.lookup_records(INSTANCES, {"region": "r"}, timeout=0.05)

    @pytest.mark.asyncio
    async def test_default_timeout_applies(self):
        async def handler(method, params):
            await asyncio.sleep(10)

        collector = RecordCollector(
            fake_clients(FakeRemote(handler)), retry_policy=NO_WAIT, default_timeout=0.05
        )

        with pytest.raises(DeadlineExceededError):
            await collector.lookup_records(ACCOUNTS)

    @pytest.mark.asyncio
    async def test_unknown_client_namespace(self):
        remote = FakeRemote()
        schema = make_schema(namespace_details=NamespaceDetails(name="nope"))

        with pytest.raises(UnknownClientError, match="nope"):
            await collector_for(remote).lookup_records(schema, {})

        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_unknown_client_in_dependency_fails_before_any_call(self):
        remote = FakeRemote(lambda method, params: {"Items": ["111"]})
        accounts = make_schema("Accounts", namespace_details=NamespaceDetails(name="nope"))
        instances = make_schema(
            "Instances",
            required_params={
                "accountId": ParamDescriptor(max=1, default_source=DefaultSource(schema=accounts)),
            },
        )

        with pytest.raises(UnknownClientError) as info:
            await collector_for(remote).lookup_records(instances, {})

        assert info.value.schema == "Accounts"
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_client_config_passed_to_clients(self):
        remote = FakeRemote(lambda method, params: {"Items": []})

        await collector_for(remote).lookup_records(ACCOUNTS, client_config={"region": "eu-west-1"})

        assert remote.constructed == [{"region": "eu-west-1"}]


class TestFromSettings:
    def test_loads_catalogs(self, tmp_path: Path, monkeypatch):
        (tmp_path / "clients.yaml").write_text(
            """
clients:
  inventory:
    class: recordcollector.core.clients.http_api:HttpApiClient
    config:
      base_url: http://inventory.local
""",
            encoding="utf-8",
        )
        (tmp_path / "schemas.yaml").write_text(
            """
schemas:
  Accounts:
    api_method: listAccounts
    namespace: inventory
    value: {path: AccountIds}
""",
            encoding="utf-8",
        )
        monkeypatch.setattr(settings, "clients_config_paths", [str(tmp_path / "clients.yaml")])
        monkeypatch.setattr(settings, "schemas_config_paths", [str(tmp_path / "schemas.yaml")])

        collector = RecordCollector.from_settings()

        assert collector.clients.list() == ["inventory"]
        assert collector.schemas.list() == ["Accounts"]
