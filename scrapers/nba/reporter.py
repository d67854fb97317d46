"""
=============================================================================
SUMMARY REPORTER
=============================================================================

Waits for the ledger to fill up, then prints the pass/fail report.

Other workers may still be writing when the summary starts, so the reporter
polls the ledger every POLL_INTERVAL seconds until it holds as many outcomes
as there are players, or until max_wait runs out. A timed-out wait reports
whatever is there.

A run is "healthy" when at least min_ratio of the expected outcomes were
recorded (0.5 unless configured; --strict means 1.0).
"""

import logging
import math
import time

from scrapers.nba.config import DEFAULT_MAX_WAIT, DEFAULT_MIN_RATIO, POLL_INTERVAL
from scrapers.nba.ledger import read_ledger

logger = logging.getLogger(__name__)


def recorded_count(ledger):
    return len(ledger['passed']) + len(ledger['failed'])


def wait_for_results(path, expected, poll_interval=POLL_INTERVAL, max_wait=DEFAULT_MAX_WAIT,
                     sleep=time.sleep, clock=time.monotonic):
    """
    Poll the ledger until `expected` outcomes are recorded or max_wait passes.

    RETURNS:
        dict: the last ledger read
    """
    deadline = clock() + max_wait
    ledger = read_ledger(path)

    while recorded_count(ledger) < expected:
        remaining = deadline - clock()
        if remaining <= 0:
            logger.warning(
                f"Stopped waiting after {max_wait:.0f}s with {recorded_count(ledger)}/{expected} results"
            )
            break
        logger.debug(f"Waiting for results: {recorded_count(ledger)}/{expected}")
        sleep(min(poll_interval, remaining))
        ledger = read_ledger(path)

    return ledger


def build_summary(ledger, expected, min_ratio=DEFAULT_MIN_RATIO):
    """Counts, sorted names and the health check for a ledger."""
    passed = sorted(ledger['passed'])
    failed = sorted(ledger['failed'])
    recorded = len(passed) + len(failed)
    required = math.ceil(expected * min_ratio)

    return {
        'timestamp': ledger.get('timestamp'),
        'expected': expected,
        'recorded': recorded,
        'passed_count': len(passed),
        'failed_count': len(failed),
        'passed': passed,
        'failed': failed,
        'required': required,
        'healthy': recorded >= required,
    }


def format_summary(summary):
    lines = [
        '',
        '===== TEST RESULTS SUMMARY =====',
        f"Total players tested: {summary['expected']}",
        f"Results recorded: {summary['recorded']}",
        f"Passed: {summary['passed_count']} | Failed: {summary['failed_count']}",
    ]

    if summary['passed']:
        lines.append('')
        lines.append('✅ Players that met criteria (3PM average >= 1):')
        lines.extend(f"   {i}. {name}" for i, name in enumerate(summary['passed'], 1))

    if summary['failed']:
        lines.append('')
        lines.append('❌ Players that failed to meet criteria:')
        lines.extend(f"   {i}. {name}" for i, name in enumerate(summary['failed'], 1))

    if not summary['healthy']:
        lines.append('')
        lines.append(
            f"WARNING: only {summary['recorded']} of {summary['expected']} results recorded "
            f"(need {summary['required']})"
        )

    lines.append('')
    lines.append('================================')
    lines.append('')
    return '\n'.join(lines)


def print_summary(summary):
    print(format_summary(summary))
