"""
Tests for the shared results ledger.
"""

import json
import os
import threading
import time

import pytest

from scrapers.nba import ledger as ledger_module
from scrapers.nba.errors import LedgerWriteContentionError
from scrapers.nba.ledger import (
    LockBusy,
    ensure_ledger,
    initialize_ledger,
    ledger_lock,
    read_ledger,
    record_result,
)


def load_raw(path):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def test_initialize_writes_empty_ledger(ledger_path):
    initialize_ledger(ledger_path)

    data = load_raw(ledger_path)
    assert data['passed'] == []
    assert data['failed'] == []
    assert data['timestamp']


def test_initialize_replaces_previous_results(ledger_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Luka Doncic', True)

    initialize_ledger(ledger_path)

    assert read_ledger(ledger_path)['passed'] == []


def test_initialize_creates_missing_directories(tmp_path):
    path = str(tmp_path / 'output' / 'json' / 'results.json')

    initialize_ledger(path)

    assert os.path.exists(path)


def test_record_passed_and_failed(ledger_path):
    initialize_ledger(ledger_path)

    assert record_result(ledger_path, 'Luka Doncic', True) is True
    assert record_result(ledger_path, 'Dereck Lively II', False) is True

    ledger = read_ledger(ledger_path)
    assert ledger['passed'] == ['Luka Doncic']
    assert ledger['failed'] == ['Dereck Lively II']


def test_record_is_idempotent(ledger_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Kyrie Irving', True)
    before = load_raw(ledger_path)

    assert record_result(ledger_path, 'Kyrie Irving', True) is False

    assert load_raw(ledger_path) == before


def test_name_never_lands_in_both_lists(ledger_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Kyrie Irving', True)

    assert record_result(ledger_path, 'Kyrie Irving', False) is False

    ledger = read_ledger(ledger_path)
    assert ledger['passed'] == ['Kyrie Irving']
    assert ledger['failed'] == []


def test_record_without_initialized_file(ledger_path):
    record_result(ledger_path, 'Luka Doncic', True)

    assert read_ledger(ledger_path)['passed'] == ['Luka Doncic']


def test_read_missing_file_is_empty(ledger_path):
    ledger = read_ledger(ledger_path)

    assert ledger['passed'] == [] and ledger['failed'] == []


def test_read_corrupt_file_is_empty(ledger_path):
    with open(ledger_path, 'w', encoding='utf-8') as f:
        f.write('{"timestamp": "2025-01-15T10:00:00Z", "passed": ["Luka Do')

    ledger = read_ledger(ledger_path)

    assert ledger['passed'] == [] and ledger['failed'] == []


def test_record_over_corrupt_file(ledger_path):
    with open(ledger_path, 'w', encoding='utf-8') as f:
        f.write('not json')

    record_result(ledger_path, 'Luka Doncic', False)

    assert read_ledger(ledger_path)['failed'] == ['Luka Doncic']


def test_read_normalizes_missing_keys(ledger_path):
    with open(ledger_path, 'w', encoding='utf-8') as f:
        json.dump({'passed': ['A', 'A', 'B']}, f)

    ledger = read_ledger(ledger_path)

    assert ledger['passed'] == ['A', 'B']
    assert ledger['failed'] == []
    assert ledger['timestamp']


def test_no_temp_files_left_behind(ledger_path, tmp_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Luka Doncic', True)

    assert sorted(os.listdir(tmp_path)) == ['results.json']


def test_busy_lock_raises_after_retries(ledger_path):
    initialize_ledger(ledger_path)

    with ledger_lock(ledger_path):
        with pytest.raises(LedgerWriteContentionError):
            record_result(ledger_path, 'Luka Doncic', True, attempts=3, backoff=0)

    assert read_ledger(ledger_path)['passed'] == []
    assert not os.path.exists(ledger_path + '.lock')


def test_stale_lock_is_broken(ledger_path):
    initialize_ledger(ledger_path)
    lock_path = ledger_path + '.lock'
    with open(lock_path, 'w') as f:
        f.write('12345')
    old = time.time() - 3600
    os.utime(lock_path, (old, old))

    record_result(ledger_path, 'Luka Doncic', True, attempts=3, backoff=0)

    assert read_ledger(ledger_path)['passed'] == ['Luka Doncic']
    assert not os.path.exists(lock_path)


def test_name_in_both_lists_on_disk_keeps_passed(ledger_path):
    with open(ledger_path, 'w', encoding='utf-8') as f:
        json.dump({'timestamp': '2025-01-15T10:00:00Z', 'passed': ['A'], 'failed': ['A', 'C']}, f)

    assert read_ledger(ledger_path)['failed'] == ['C']

    record_result(ledger_path, 'B', True)

    ledger = load_raw(ledger_path)
    assert ledger['passed'] == ['A', 'B']
    assert ledger['failed'] == ['C']


def test_stale_lock_replaced_by_live_lock_survives(ledger_path, monkeypatch):
    lock_path = ledger_path + '.lock'
    with open(lock_path, 'w') as f:
        f.write('12345')
    old = time.time() - 3600
    os.utime(lock_path, (old, old))

    real_rename = os.rename

    def rename_after_other_worker(src, dst):
        # Another worker clears the stale lock and takes a fresh one first
        fresh = ledger_path + '.fresh'
        with open(fresh, 'w') as f:
            f.write('67890')
        os.replace(fresh, lock_path)
        real_rename(src, dst)

    monkeypatch.setattr(ledger_module.os, 'rename', rename_after_other_worker)

    with pytest.raises(LockBusy):
        with ledger_lock(ledger_path):
            pass

    with open(lock_path) as f:
        assert f.read() == '67890'
    assert sorted(p for p in os.listdir(os.path.dirname(lock_path)) if p.endswith('.stale')) == []


def test_concurrent_writers_lose_nothing(ledger_path):
    initialize_ledger(ledger_path)
    errors = []

    def worker(worker_id):
        for i in range(10):
            try:
                record_result(ledger_path, f'Player {worker_id}-{i}', i % 2 == 0,
                              attempts=500, backoff=0.002)
            except LedgerWriteContentionError as e:
                errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ledger = read_ledger(ledger_path)
    assert errors == []
    assert len(ledger['passed']) == 40
    assert len(ledger['failed']) == 40
    assert not set(ledger['passed']) & set(ledger['failed'])


def test_ensure_ledger_keeps_existing_results(ledger_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Luka Doncic', True)

    assert ensure_ledger(ledger_path) is False
    assert read_ledger(ledger_path)['passed'] == ['Luka Doncic']


def test_ensure_ledger_fresh_wipes(ledger_path):
    initialize_ledger(ledger_path)
    record_result(ledger_path, 'Luka Doncic', True)

    assert ensure_ledger(ledger_path, fresh=True) is True
    assert read_ledger(ledger_path)['passed'] == []


def test_ensure_ledger_creates_missing(ledger_path):
    assert ensure_ledger(ledger_path) is True
    assert os.path.exists(ledger_path)
