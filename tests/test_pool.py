"""Tests for ConnectionPool and the disposal strategies."""

import pytest
from unittest.mock import MagicMock

from conftest import FakeConnection
from consulweb.client.descriptor import RequestDescriptor
from consulweb.client.headers import EVENT_STREAM, JSON_CONTENT_TYPE
from consulweb.client.pool import ConnectionPool, Disposer, StreamingDisposer
from consulweb.client.transport import ReadyState


def create_descriptor(url="/v1/kv/a", ready_state=ReadyState.OPENED, streaming=False):
    """Create a descriptor backed by a fake connection"""
    return RequestDescriptor(
        "GET",
        url,
        {"index": 1} if streaming else {},
        FakeConnection(ready_state),
        content_type=EVENT_STREAM if streaming else JSON_CONTENT_TYPE,
    )


class TestAcquire:
    """Test acquisition and FIFO eviction."""

    def test_acquire_returns_descriptor_id(self):
        pool = ConnectionPool()
        descriptor = create_descriptor()

        assert pool.acquire(descriptor) == descriptor.id
        assert descriptor.id in pool
        assert pool.get(descriptor.id) is descriptor

    def test_unbounded_pool_keeps_everything(self):
        pool = ConnectionPool()
        for i in range(50):
            pool.acquire(create_descriptor(f"/v1/kv/{i}"))

        assert len(pool) == 50

    @pytest.mark.parametrize("capacity", [1, 2, 3, 5])
    def test_never_exceeds_capacity_and_evicts_oldest(self, capacity):
        disposer = MagicMock(spec=Disposer)
        pool = ConnectionPool(disposer, max_connections=capacity)
        acquired = []

        for i in range(capacity * 3):
            descriptor = create_descriptor(f"/v1/kv/{i}")
            pool.acquire(descriptor)
            acquired.append(descriptor)

            assert len(pool) <= capacity
            assert pool.ids() == [d.id for d in acquired[-capacity:]]

        evicted = [call.args[0] for call in disposer.dispose.call_args_list]
        assert evicted == acquired[: capacity * 2]

    def test_eviction_skips_released_entries(self):
        pool = ConnectionPool(max_connections=2)
        first, second, third = (create_descriptor(f"/v1/kv/{i}") for i in range(3))
        pool.acquire(first)
        pool.acquire(second)
        pool.release(first.id)

        pool.acquire(third)

        assert pool.ids() == [second.id, third.id]

    def test_reacquire_same_descriptor_is_not_disposed(self):
        disposer = MagicMock(spec=Disposer)
        pool = ConnectionPool(disposer, max_connections=1)
        descriptor = create_descriptor()

        pool.acquire(descriptor)
        pool.acquire(descriptor)

        assert len(pool) == 1
        disposer.dispose.assert_not_called()

    @pytest.mark.parametrize("capacity", [0, -1, 1.5, "2", True])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            ConnectionPool(max_connections=capacity)


class TestRelease:
    """Test release and purge."""

    def test_release_disposes_entry(self):
        disposer = MagicMock(spec=Disposer)
        pool = ConnectionPool(disposer)
        descriptor = create_descriptor()
        pool.acquire(descriptor)

        pool.release(descriptor.id)

        assert len(pool) == 0
        disposer.dispose.assert_called_once_with(descriptor)

    def test_release_unknown_id_is_noop(self):
        disposer = MagicMock(spec=Disposer)
        pool = ConnectionPool(disposer)
        pool.acquire(create_descriptor())

        pool.release("not-there")
        pool.release("not-there")

        assert len(pool) == 1
        disposer.dispose.assert_not_called()

    def test_purge_empties_pool_in_order(self):
        pool = ConnectionPool()
        descriptors = [create_descriptor(f"/v1/kv/{i}") for i in range(4)]
        for descriptor in descriptors:
            pool.acquire(descriptor)

        assert pool.purge() == descriptors
        assert len(pool) == 0
        assert pool.purge() == []

    def test_purge_aborts_only_unstarted_streams(self):
        pool = ConnectionPool(StreamingDisposer())
        streams = {state: create_descriptor(ready_state=state, streaming=True) for state in ReadyState}
        plain = create_descriptor(ready_state=ReadyState.OPENED)
        for descriptor in [*streams.values(), plain]:
            pool.acquire(descriptor)

        pool.purge()

        assert streams[ReadyState.UNSENT].connection.abort_calls == 1
        assert streams[ReadyState.OPENED].connection.abort_calls == 1
        assert streams[ReadyState.HEADERS_RECEIVED].connection.abort_calls == 0
        assert streams[ReadyState.LOADING].connection.abort_calls == 0
        assert streams[ReadyState.DONE].connection.abort_calls == 0
        assert plain.connection.abort_calls == 0

    def test_disposal_errors_are_swallowed(self, caplog):
        connection = FakeConnection(ReadyState.OPENED)
        connection.abort = MagicMock(side_effect=RuntimeError("socket gone"))
        descriptor = RequestDescriptor("GET", "/v1/kv/a", {"index": 3}, connection, content_type=EVENT_STREAM)
        pool = ConnectionPool(StreamingDisposer(), max_connections=1)
        pool.acquire(descriptor)

        pool.acquire(create_descriptor())
        pool.purge()

        connection.abort.assert_called_once()
        assert len(pool) == 0
        assert "Failed to dispose" in caplog.text
