"""Tests for the job state store."""

import threading

from pipepub.schemas import JobStateModel, OrchestratorJob
from pipepub.state_store import InMemoryJobStateStore


def test_put_get_remove():
    store = InMemoryJobStateStore()
    model = JobStateModel(job=OrchestratorJob("job-1"))

    store.put_model("build-1", model)
    assert store.get_model("build-1") is model
    assert "build-1" in store
    assert len(store) == 1

    store.remove_model("build-1")
    assert store.get_model("build-1") is None
    assert len(store) == 0


def test_remove_missing_is_noop():
    store = InMemoryJobStateStore()
    store.remove_model("nope")
    assert len(store) == 0


def test_put_replaces_stale_entry(caplog):
    store = InMemoryJobStateStore()
    first = JobStateModel()
    second = JobStateModel()

    store.put_model("k", first)
    store.put_model("k", second)

    assert store.get_model("k") is second
    assert "Replacing stale job state" in caplog.text


def test_concurrent_builds_only_touch_their_own_entry():
    store = InMemoryJobStateStore()
    errors = []

    def run_build(n: int):
        key = f"build-{n}"
        model = JobStateModel(job=OrchestratorJob(f"job-{n}"))
        for _ in range(200):
            store.put_model(key, model)
            if store.get_model(key) is not model:
                errors.append(key)
            store.remove_model(key)

    threads = [threading.Thread(target=run_build, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(store) == 0
