"""
=============================================================================
RESULTS LEDGER
=============================================================================

A JSON file shared by every worker of a run:

    {
        "timestamp": "2025-01-15T10:30:45.123456+00:00",
        "passed": ["Luka Doncic", "Klay Thompson"],
        "failed": ["Dereck Lively II"]
    }

Worker threads and separate worker processes all add their players to the
same file. Each name ends up in at most one of the two lists.

HOW WRITES STAY CONSISTENT:
    - record_result() reads, updates and writes the file while holding
      <ledger>.lock, a lock file created with O_CREAT | O_EXCL
    - the new content is written to a temp file and moved into place with
      os.replace(), so readers never see half a document
    - a busy lock or a failed write is retried a fixed number of times with a
      fixed pause, then LedgerWriteContentionError is raised
    - a lock file older than LEDGER_RETRY['stale_lock_after'] seconds is
      left over from a crashed worker and gets removed

Reads never fail: a missing, partial or corrupt file reads as an empty ledger.
"""

import json
import logging
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone

from scrapers.nba.config import LEDGER_RETRY
from scrapers.nba.errors import LedgerWriteContentionError

logger = logging.getLogger(__name__)


class LockBusy(Exception):
    pass


def empty_ledger(timestamp=None):
    return {
        'timestamp': timestamp or datetime.now(timezone.utc).isoformat(),
        'passed': [],
        'failed': [],
    }


def _unique(names):
    seen = set()
    result = []
    for name in names:
        if isinstance(name, str) and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def normalize_ledger(data):
    """Coerce whatever was on disk into the ledger shape."""
    if not isinstance(data, dict):
        return empty_ledger()

    passed = _unique(data.get('passed')) if isinstance(data.get('passed'), list) else []
    failed = _unique(data.get('failed')) if isinstance(data.get('failed'), list) else []
    # A name listed in both keeps its passed entry
    passed_names = set(passed)
    return {
        'timestamp': data.get('timestamp') or empty_ledger()['timestamp'],
        'passed': passed,
        'failed': [name for name in failed if name not in passed_names],
    }


def read_ledger(path):
    """Current ledger, or an empty one if the file is missing or unreadable."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        return empty_ledger()
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read ledger {path}, treating it as empty: {e}")
        return empty_ledger()

    return normalize_ledger(data)


def write_ledger(path, ledger):
    """Write the full ledger atomically."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.ledger-', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(ledger, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def initialize_ledger(path):
    """Start a fresh, empty ledger, replacing any previous one."""
    ledger = empty_ledger()
    write_ledger(path, ledger)
    logger.info(f"Initialized results ledger: {path}")
    return ledger


def ensure_ledger(path, fresh=False):
    """Initialize the ledger when asked to, or when there is none yet."""
    if fresh or not os.path.exists(path):
        initialize_ledger(path)
        return True
    logger.info(f"Reusing existing results ledger: {path}")
    return False


def _remove_stale_lock(lock_path, stale_after):
    try:
        stale = os.stat(lock_path)
    except FileNotFoundError:
        return
    age = time.time() - stale.st_mtime
    if age <= stale_after:
        return

    # Claim the lock under a private name so only one worker can remove it
    claimed = f'{lock_path}.{os.getpid()}.{threading.get_ident()}.stale'
    try:
        os.rename(lock_path, claimed)
    except FileNotFoundError:
        return

    try:
        if os.stat(claimed).st_ino != stale.st_ino:
            # A live lock replaced the stale one in between; hand it back
            try:
                os.link(claimed, lock_path)
            except FileExistsError:
                pass
            return
        logger.warning(f"Removing stale ledger lock ({age:.0f}s old): {lock_path}")
    finally:
        os.remove(claimed)


@contextmanager
def ledger_lock(path, stale_after=None):
    """Hold <path>.lock for the duration of the block; LockBusy if taken."""
    if stale_after is None:
        stale_after = LEDGER_RETRY['stale_lock_after']
    lock_path = path + '.lock'
    os.makedirs(os.path.dirname(os.path.abspath(lock_path)), exist_ok=True)

    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        _remove_stale_lock(lock_path, stale_after)
        raise LockBusy(lock_path)

    try:
        os.write(fd, str(os.getpid()).encode('ascii'))
        os.close(fd)
        yield
    finally:
        try:
            os.remove(lock_path)
        except FileNotFoundError:
            pass


def add_name(ledger, name, passed):
    """Insert name into the right list unless already recorded. Returns True if added."""
    if name in ledger['passed'] or name in ledger['failed']:
        return False
    ledger['passed' if passed else 'failed'].append(name)
    return True


def record_result(path, name, passed, attempts=None, backoff=None):
    """
    Add one player's outcome to the ledger.

    Recording a name that is already in either list changes nothing.

    RETURNS:
        bool: True if the name was added, False if it was already there

    RAISES:
        LedgerWriteContentionError: the lock stayed busy, or the write kept
        failing, for every attempt
    """
    attempts = attempts or LEDGER_RETRY['attempts']
    backoff = LEDGER_RETRY['backoff'] if backoff is None else backoff

    last_error = None
    for attempt in range(attempts):
        try:
            with ledger_lock(path):
                ledger = read_ledger(path)
                added = add_name(ledger, name, passed)
                if added:
                    write_ledger(path, ledger)
                return added
        except (LockBusy, OSError) as e:
            last_error = e
            logger.debug(f"Ledger attempt {attempt + 1} for {name} failed: {e}")
            time.sleep(backoff)

    raise LedgerWriteContentionError(
        f"Could not record {name} after {attempts} attempts: {last_error}"
    )
