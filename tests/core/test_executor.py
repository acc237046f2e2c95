from __future__ import annotations

import asyncio

import pytest

from recordcollector.contracts.schema import ParamDescriptor
from recordcollector.core.context import CollectContext
from recordcollector.core.errors import ExtractionError, ParameterAlignmentError
from recordcollector.core.executor import ParallelExecutor, gather_all
from recordcollector.core.fetcher import PaginatingFetcher
from tests.helpers.fakes import NO_WAIT, FakeRemote, fake_clients, make_schema


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def executor(remote):
    return ParallelExecutor(PaginatingFetcher(fake_clients(remote), retry_policy=NO_WAIT))


def fan_out_schema(**overrides):
    return make_schema(required_params={"id": ParamDescriptor(max=1)}, **overrides)


class TestParallelExecutor:
    @pytest.mark.asyncio
    async def test_results_follow_param_set_order_not_completion_order(self, remote, executor):
        async def handler(method, params):
            # later param sets finish first
            await asyncio.sleep(0.01 * (3 - params["id"]))
            return {"Items": [f"r{params['id']}a", f"r{params['id']}b"]}

        remote.handler = handler

        records = await executor.execute(fan_out_schema(), {"id": [0, 1, 2]}, CollectContext())

        assert records == ["r0a", "r0b", "r1a", "r1b", "r2a", "r2b"]

    @pytest.mark.asyncio
    async def test_param_sets_run_concurrently(self, remote, executor):
        running = {"now": 0, "peak": 0}

        async def handler(method, params):
            running["now"] += 1
            running["peak"] = max(running["peak"], running["now"])
            await asyncio.sleep(0.02)
            running["now"] -= 1
            return {"Items": [params["id"]]}

        remote.handler = handler

        await executor.execute(fan_out_schema(), {"id": [1, 2, 3, 4]}, CollectContext())

        assert running["peak"] == 4

    @pytest.mark.asyncio
    async def test_first_error_wins_and_siblings_are_cancelled(self, remote, executor):
        cancelled = []

        async def handler(method, params):
            if params["id"] == "bad":
                return {"Nope": []}
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(params["id"])
                raise

        remote.handler = handler

        with pytest.raises(ExtractionError):
            await asyncio.wait_for(
                executor.execute(fan_out_schema(), {"id": ["slow", "bad"]}, CollectContext()),
                timeout=2,
            )

        assert cancelled == ["slow"]

    @pytest.mark.asyncio
    async def test_custom_merge_individual(self, remote, executor):
        remote.handler = lambda method, params: {"Items": [params["id"]]}
        schema = fan_out_schema(merge_individual=lambda results: {"batches": results})

        records = await executor.execute(schema, {"id": ["a", "b"]}, CollectContext())

        assert records == {"batches": [["a"], ["b"]]}

    @pytest.mark.asyncio
    async def test_builder_errors_prevent_any_call(self, remote, executor):
        schema = make_schema(
            required_params={"a": ParamDescriptor(max=1), "b": ParamDescriptor(max=1)}
        )

        with pytest.raises(ParameterAlignmentError):
            await executor.execute(schema, {"a": [1, 2], "b": [1]}, CollectContext())

        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_single_param_set(self, remote, executor):
        remote.handler = lambda method, params: {"Items": [params]}

        records = await executor.execute(make_schema(params={"x": 1}), {"y": 2}, CollectContext())

        assert records == [{"x": 1, "y": 2}]


class TestGatherAll:
    @pytest.mark.asyncio
    async def test_keeps_input_order(self):
        async def value(v, delay):
            await asyncio.sleep(delay)
            return v

        assert await gather_all([value(1, 0.02), value(2, 0.0), value(3, 0.01)]) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await gather_all([]) == []
