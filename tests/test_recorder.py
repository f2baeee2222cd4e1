import random
import threading
from concurrent.futures import ThreadPoolExecutor

from apipulse.core.recorder import ResultRecorder


def test_record_updates_counters(make_result):
    recorder = ResultRecorder()
    recorder.record(make_result(success=True))
    recorder.record(make_result(success=False, status_code=500))
    recorder.record(make_result(success=True))

    assert recorder.current_count() == 3
    assert recorder.success_count() == 2
    assert recorder.failure_count() == 1
    assert recorder.counts() == (3, 2, 1)
    assert len(recorder) == 3


def test_results_returns_a_copy(make_result):
    recorder = ResultRecorder()
    recorder.record(make_result())

    snapshot = recorder.results()
    snapshot.clear()

    assert len(recorder.results()) == 1


def test_reset_clears_previous_run(make_result):
    recorder = ResultRecorder()
    for _ in range(250):
        recorder.record(make_result(success=False, status_code=0))

    recorder.reset()
    assert recorder.counts() == (0, 0, 0)
    assert recorder.results() == []

    for _ in range(5):
        recorder.record(make_result())
    assert recorder.current_count() == 5
    assert recorder.success_count() == 5
    assert recorder.failure_count() == 0


def test_concurrent_producers_lose_no_updates(make_result):
    producers = 8
    per_producer = 2000
    rng = random.Random(1234)
    outcomes = [[rng.random() < 0.7 for _ in range(per_producer)] for _ in range(producers)]
    expected_success = sum(sum(o) for o in outcomes)

    recorder = ResultRecorder()
    torn_reads = []
    done = threading.Event()

    def produce(flags):
        for ok in flags:
            recorder.record(make_result(success=ok, status_code=200 if ok else 503))

    def observe():
        while not done.is_set():
            total, success, failure = recorder.counts()
            if success + failure != total:
                torn_reads.append((total, success, failure))

    observer = threading.Thread(target=observe)
    observer.start()
    with ThreadPoolExecutor(max_workers=producers) as pool:
        list(pool.map(produce, outcomes))
    done.set()
    observer.join()

    assert torn_reads == []
    assert recorder.current_count() == producers * per_producer
    assert len(recorder.results()) == producers * per_producer
    assert recorder.success_count() == expected_success
    assert recorder.failure_count() == producers * per_producer - expected_success
