from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from recordcollector.contracts.schema import DefaultSource, ParamDescriptor, ValueSpec
from recordcollector.core.collector import RecordCollector
from recordcollector.core.schemas.registry import SchemaRegistry
from recordcollector.main import create_app
from tests.helpers.fakes import NO_WAIT, FakeRemote, fake_clients, make_schema


def inventory_handler(method, params):
    if method == "listAccounts":
        return {"Items": ["222", "111"]}
    if method == "listInstances":
        return {"Items": [{"InstanceId": f"i-{params['accountId']}", "region": params["region"]}]}
    return {}


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote(inventory_handler)


@pytest.fixture
def schemas() -> SchemaRegistry:
    registry = SchemaRegistry()
    registry.register(make_schema("Accounts"))
    registry.register(
        make_schema(
            "Instances",
            value=ValueSpec(path="Items", sort_by="InstanceId"),
            required_params={
                "region": ParamDescriptor(max=1),
                "accountId": ParamDescriptor(
                    max=1, default_source=DefaultSource(schema="Accounts")
                ),
            },
        )
    )
    registry.register(make_schema("Broken", value=ValueSpec(path="Missing")))
    registry.register(
        make_schema(
            "Orphan",
            required_params={"ownerId": ParamDescriptor(max=1)},
        )
    )
    return registry


@pytest.fixture
def collector(remote, schemas) -> RecordCollector:
    return RecordCollector(
        fake_clients(remote), schemas=schemas, retry_policy=NO_WAIT, default_timeout=None
    )


@pytest.fixture
def client(collector) -> TestClient:
    return TestClient(create_app(collector=collector))
