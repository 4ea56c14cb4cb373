import math
import threading
import time

import pytest

from clientsync.http_client import HttpClient
from clientsync.statuses import chunk, fetch_statuses

from conftest import NO_JSON, Response, Session, network_error


def test_chunk_preserves_order():
    assert chunk([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunk([], 100) == []
    with pytest.raises(ValueError):
        chunk([1], 0)


@pytest.mark.parametrize("n", [0, 1, 99, 100, 101, 1234])
def test_issues_ceil_n_over_batch_size_requests(http, session, n):
    result = fetch_statuses(http, list(range(n)), batch_size=100, concurrency=5)
    assert len(session.calls) == math.ceil(n / 100)
    assert result.batches_sent == math.ceil(n / 100)
    assert len(result.statuses) == n


def test_request_payload(http, session):
    fetch_statuses(http, ["x", "y"], batch_size=100)
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://test/api/clients"
    assert call["json"] == {"userIds": ["x", "y"]}


def test_results_in_batch_order(http):
    result = fetch_statuses(http, list(range(1000)), batch_size=10, concurrency=5)
    assert [s.id for s in result.statuses] == list(range(1000))
    assert result.statuses[3].status == "status-3"


def test_failed_batch_is_dropped_siblings_kept(http, api):
    api.failing_batch_first_ids = {200}
    result = fetch_statuses(http, list(range(500)), batch_size=100, concurrency=5)
    ids = {s.id for s in result.statuses}
    assert ids == set(range(500)) - set(range(200, 300))
    assert result.partial
    [failure] = result.failed
    assert failure.index == 2
    assert failure.ids == list(range(200, 300))
    assert failure.status == 500


def test_network_error_fails_only_that_batch(settings):
    def handler(method, url, json=None, **kwargs):
        if json["userIds"][0] == 0:
            return network_error()
        return Response(200, [{"id": i, "status": "ok"} for i in json["userIds"]])

    http = HttpClient(settings, session=Session(handler))
    result = fetch_statuses(http, list(range(30)), batch_size=10, concurrency=5)
    assert [s.id for s in result.statuses] == list(range(10, 30))
    assert len(result.failed) == 1


def test_waves_are_bounded_and_sequential(settings):
    lock = threading.Lock()
    events = []
    in_flight = 0
    peak = 0

    def handler(method, url, json=None, **kwargs):
        nonlocal in_flight, peak
        batch = json["userIds"][0] // 10
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
            events.append(("start", batch))
        time.sleep(0.01)
        with lock:
            in_flight -= 1
            events.append(("end", batch))
        return Response(200, [])

    http = HttpClient(settings, session=Session(handler))
    result = fetch_statuses(http, list(range(120)), batch_size=10, concurrency=5)

    assert result.batches_sent == 12
    assert peak <= 5

    def position(kind, batch):
        return events.index((kind, batch))

    waves = [range(0, 5), range(5, 10), range(10, 12)]
    for previous, current in zip(waves, waves[1:]):
        last_end = max(position("end", b) for b in previous)
        first_start = min(position("start", b) for b in current)
        assert first_start > last_end


def test_few_batches_go_out_in_one_wave(settings):
    barrier = threading.Barrier(3, timeout=5)

    def handler(method, url, json=None, **kwargs):
        # Only passes if all three batches are in flight together
        barrier.wait()
        return Response(200, [{"id": i, "status": "ok"} for i in json["userIds"]])

    http = HttpClient(settings, session=Session(handler))
    result = fetch_statuses(http, list(range(300)), batch_size=100, concurrency=5)
    assert len(result.statuses) == 300
    assert not result.partial


@pytest.mark.parametrize("body", [NO_JSON, {"error": "bad"}, ["oops"], [1, 2]])
def test_malformed_batch_is_dropped_siblings_kept(settings, body):
    def handler(method, url, json=None, **kwargs):
        if json["userIds"][0] == 0:
            return Response(200, body)
        return Response(200, [{"id": i, "status": "ok"} for i in json["userIds"]])

    http = HttpClient(settings, session=Session(handler))
    result = fetch_statuses(http, list(range(30)), batch_size=10, concurrency=5)
    assert [s.id for s in result.statuses] == list(range(10, 30))
    [failure] = result.failed
    assert failure.index == 0
    assert failure.ids == list(range(10))
