import queue

from critscore.workerpool import worker_pool


def test_one_worker():
    counter = []
    wait = worker_pool(1, lambda worker: counter.append(worker))
    wait()
    assert counter == [0]


def test_many_workers():
    seen = []
    wait = worker_pool(10, lambda worker: seen.append(worker))
    wait()
    assert len(seen) == 10


def test_unique_worker_id():
    seen = []
    wait = worker_pool(10, lambda worker: seen.append(worker))
    wait()
    assert sorted(seen) == list(range(10))


def test_example_workload():
    nums = queue.Queue()
    results = []

    wait = worker_pool(
        5, lambda worker: results.extend([n * 2 for n in iter(nums.get, None)])
    )
    for i in range(10):
        nums.put(i)
    for _ in range(5):
        nums.put(None)
    wait()

    assert len(results) == 10
    assert sorted(results) == [i * 2 for i in range(10)]