#!/usr/bin/env python3
"""
NBA 3PM Check - Ledger Verification Script

Run this after a (possibly multi-process) run to check the results ledger.
Usage: python scripts/verify_ledger.py [--ledger PATH] [--expected N]

This script checks:
1. The ledger file exists and is valid JSON
2. Passed and failed lists are present
3. No player appears twice, or in both lists
4. How many results were recorded versus expected
5. How old the ledger is
"""

import argparse
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from scrapers.nba.config import DEFAULT_RESULTS_FILE  # noqa: E402

STALE_AFTER_HOURS = 24


def load_json(filepath):
    """Load a JSON file safely. Returns (data, error message)."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f), None
    except FileNotFoundError:
        return None, 'file not found'
    except json.JSONDecodeError as e:
        return None, f'invalid JSON ({e})'


def find_duplicates(names):
    seen = set()
    duplicates = set()
    for name in names:
        if name in seen:
            duplicates.add(name)
        seen.add(name)
    return sorted(duplicates)


def ledger_age_hours(timestamp, now=None):
    """Hours since the ledger was started, or None if the timestamp is unusable."""
    if not timestamp:
        return None
    try:
        started = datetime.fromisoformat(str(timestamp).replace('Z', '+00:00'))
    except ValueError:
        return None
    if started.tzinfo is None:
        started = started.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return (now - started).total_seconds() / 3600


def analyze_ledger(data, expected=None, now=None):
    """Collect issues and warnings for a loaded ledger."""
    issues = []
    warnings = []

    if not isinstance(data, dict):
        return {'issues': ['Ledger is not a JSON object'], 'warnings': [], 'passed': 0, 'failed': 0}

    passed = data.get('passed')
    failed = data.get('failed')
    if not isinstance(passed, list):
        issues.append('"passed" list is missing')
        passed = []
    if not isinstance(failed, list):
        issues.append('"failed" list is missing')
        failed = []

    for label, names in (('passed', passed), ('failed', failed)):
        for name in find_duplicates(names):
            issues.append(f'{name} appears more than once in {label}')

    for name in sorted(set(passed) & set(failed)):
        issues.append(f'{name} appears in both passed and failed')

    recorded = len(set(passed) | set(failed))
    if expected is not None and recorded < expected:
        warnings.append(f'Only {recorded} of {expected} expected results recorded')
    if expected is not None and recorded > expected:
        warnings.append(f'{recorded} results recorded but only {expected} expected')

    age = ledger_age_hours(data.get('timestamp'), now=now)
    if age is None:
        warnings.append('Ledger has no usable timestamp')
    elif age > STALE_AFTER_HOURS:
        warnings.append(f'Ledger is {age:.0f} hours old')

    return {
        'issues': issues,
        'warnings': warnings,
        'passed': len(passed),
        'failed': len(failed),
        'recorded': recorded,
        'age_hours': age,
    }


def print_header(title):
    """Print a section header."""
    print()
    print('=' * 60)
    print(f'  {title}')
    print('=' * 60)


def print_divider():
    """Print a divider line."""
    print('-' * 60)


def main(argv=None):
    """Main verification routine."""
    parser = argparse.ArgumentParser(description='Verify a 3PM results ledger')
    parser.add_argument('--ledger', default=os.getenv('RESULTS_FILE', DEFAULT_RESULTS_FILE))
    parser.add_argument('--expected', type=int, help='Number of players the run should have recorded')
    args = parser.parse_args(argv)

    print_header('NBA 3PM CHECK - LEDGER VERIFICATION REPORT')
    print(f'  Report Date: {datetime.now().strftime("%Y-%m-%d %H:%M")}')
    print(f'  Ledger: {args.ledger}')

    data, error = load_json(args.ledger)
    if error:
        print_divider()
        print(f'  [X] Ledger could not be loaded: {error}')
        print('STATUS: ISSUES FOUND - Review required')
        return 1

    result = analyze_ledger(data, expected=args.expected)

    print_header('RESULTS')
    print_divider()
    print(f'  Passed:    {result["passed"]}')
    print(f'  Failed:    {result["failed"]}')
    print(f'  Recorded:  {result["recorded"]}')
    if args.expected is not None:
        print(f'  Expected:  {args.expected}')

    print_header('DATA QUALITY CHECKS')
    print_divider()

    if result['issues']:
        print('ISSUES (require attention):')
        for issue in result['issues']:
            print(f'  [X] {issue}')
        print()

    if result['warnings']:
        print('WARNINGS (informational):')
        for warning in result['warnings']:
            print(f'  [!] {warning}')
        print()

    if not result['issues'] and not result['warnings']:
        print('All checks passed - no issues found.')

    print_divider()
    if result['issues']:
        print('STATUS: ISSUES FOUND - Review required')
        return 1
    print('STATUS: LEDGER OK')
    return 0


if __name__ == '__main__':
    sys.exit(main())
