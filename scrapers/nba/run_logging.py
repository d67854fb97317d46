"""
Logging and console output for a tracker run.

Worker threads and shard processes all announce the same start-up messages.
A run owns one OnceFilter; records logged with extra={'once': True} pass the
first time and are dropped after that. Nothing is shared between runs.
"""

import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

BOLD = '\x1b[1m'
RESET = '\x1b[0m'
GREEN = '\x1b[32m'
RED = '\x1b[31m'

DIVIDER = '-' * 35


class OnceFilter(logging.Filter):
    """Drop repeats of records flagged as once-only."""

    def __init__(self, name=''):
        super().__init__(name)
        self.seen = set()

    def filter(self, record):
        if not getattr(record, 'once', False):
            return True
        message = record.getMessage()
        if message in self.seen:
            return False
        self.seen.add(message)
        return True


def setup_logging(verbose=False):
    """
    Configure root logging and attach a fresh OnceFilter for this run.

    The filter goes on the root handlers rather than a logger, so records
    from every module logger pass through it.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    once_filter = OnceFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(once_filter)
    return once_filter


def release_logging(once_filter):
    """Detach a run's filter from the root handlers."""
    for handler in logging.getLogger().handlers:
        handler.removeFilter(once_filter)


def format_player_result(result, color=True):
    """Render one player's outcome as the block printed after evaluation."""
    if result['passed']:
        label = f"{GREEN}{BOLD}PASS{RESET}" if color else 'PASS'
    else:
        label = f"{RED}{BOLD}FAIL{RESET}" if color else 'FAIL'

    if result.get('average') is None:
        average = 'n/a'
    else:
        average = f"{result['average']:.2f}"

    number = result.get('number')
    prefix = f"{number}. " if number else ''

    lines = [
        DIVIDER,
        f"{prefix}{result['name']} ({result.get('player_id')})",
        f"   - 3PM Average: {average}",
        f"   - Result: {label}",
    ]
    if result.get('error'):
        lines.append(f"   - Error: {result['error']}")
    lines.append(DIVIDER)
    return '\n'.join(lines)
