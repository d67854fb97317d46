"""
=============================================================================
NBA 3PM DAILY CHECK
=============================================================================

PURPOSE:
    Checks whether each active player on a team averages at least one made
    three-pointer (3PM) over their last 5 games, using NBA.com profile pages.

WHAT IT DOES:
    1. Fetches the team's active roster from the SportsData.io API
    2. Opens every player's NBA.com profile in Chrome (several at once with
       --workers) and averages the 3PM column of the "Last 5 Games" table
    3. Marks each player PASS (average >= 1) or FAIL, including players whose
       page could not be read
    4. Adds every outcome to a shared JSON ledger
    5. Waits for the ledger to hold every player, then prints the summary

HOW TO USE:
    python -m scrapers.nba.daily_scraper                  # full run, fresh ledger
    python -m scrapers.nba.daily_scraper --workers 4      # 4 browsers in parallel
    python -m scrapers.nba.daily_scraper --reuse-ledger   # keep earlier results

    Splitting the roster across separate processes:
        python -m scrapers.nba.daily_scraper --init-only
        python -m scrapers.nba.daily_scraper --worker-index 0 --worker-count 2 --no-summary &
        python -m scrapers.nba.daily_scraper --worker-index 1 --worker-count 2 --no-summary &
        python -m scrapers.nba.daily_scraper --summary-only

EXIT CODE:
    0 when the summary is healthy, 1 when too few results were recorded or
    the roster could not be loaded.
"""

import argparse
import functools
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed

from selenium.common.exceptions import WebDriverException

from scrapers.nba.config import THREE_POINT_THRESHOLD, load_settings, team_name
from scrapers.nba.errors import (
    ConfigurationError,
    LedgerWriteContentionError,
    PlayerEvaluationError,
    RosterError,
)
from scrapers.nba.ledger import ensure_ledger, initialize_ledger, record_result
from scrapers.nba.reporter import build_summary, print_summary, wait_for_results
from scrapers.nba.roster import get_players_with_cache
from scrapers.nba.run_logging import format_player_result, release_logging, setup_logging
from scrapers.nba.stats_scraper import create_driver, fetch_three_point_average

logger = logging.getLogger(__name__)


def select_shard(players, worker_index=0, worker_count=1):
    """(number, player) pairs this process is responsible for. Numbers start at 1."""
    return [
        (i + 1, player)
        for i, player in enumerate(players)
        if i % worker_count == worker_index
    ]


def evaluate_player(player, number, driver_factory, timeouts=None, threshold=THREE_POINT_THRESHOLD):
    """
    Scrape one player and decide PASS/FAIL.

    Never raises for a player-level problem: the error message is stored in
    the result and the player counts as failed.
    """
    result = {
        'name': player['name'],
        'player_id': player['player_id'],
        'number': number,
        'passed': False,
        'average': None,
        'error': None,
    }

    driver = None
    try:
        driver = driver_factory()
        average = fetch_three_point_average(driver, player, timeouts)
        result['average'] = average
        result['passed'] = average >= threshold
    except (PlayerEvaluationError, WebDriverException) as e:
        logger.error(f"Error processing {player['name']}: {e}")
        result['error'] = str(e) or e.__class__.__name__
    except Exception as e:
        logger.error(f"Unexpected error processing {player['name']}: {e}", exc_info=True)
        result['error'] = str(e) or e.__class__.__name__
    finally:
        if driver is not None:
            try:
                driver.quit()
            except Exception as e:
                logger.debug(f"Driver for {player['name']} did not quit cleanly: {e}")

    return result


def record_outcome(ledger_path, result):
    """Write a result to the ledger. Returns False if it could not be stored."""
    try:
        record_result(ledger_path, result['name'], result['passed'])
        return True
    except LedgerWriteContentionError as e:
        logger.error(f"Result for {result['name']} not saved: {e}")
        return False


def run_players(assigned, ledger_path, driver_factory, workers=1, timeouts=None, color=True):
    """Evaluate (number, player) pairs on a thread pool and record each outcome."""
    results = []
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = [
            executor.submit(evaluate_player, player, number, driver_factory, timeouts)
            for number, player in assigned
        ]
        for future in as_completed(futures):
            result = future.result()
            print(format_player_result(result, color=color))
            record_outcome(ledger_path, result)
            results.append(result)

    results.sort(key=lambda r: r['number'])
    return results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Check 5-game 3PM averages for a team roster')
    parser.add_argument('--team', help='Team key for the roster API (default: NBA_TEAM or DAL)')
    parser.add_argument('--ledger', help='Path of the results ledger (default: RESULTS_FILE)')
    parser.add_argument('--fresh', action='store_true', help='Start a new ledger even if one exists')
    parser.add_argument('--reuse-ledger', action='store_true', help='Keep results already in the ledger')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--workers', type=int, help='Browsers to run in parallel in this process')
    parser.add_argument('--worker-index', type=int, default=0, help='Shard of the roster this process handles')
    parser.add_argument('--worker-count', type=int, default=1, help='Total number of shard processes')
    parser.add_argument('--max-wait', type=float, help='Seconds the summary waits for every result')
    parser.add_argument('--min-ratio', type=float, help='Share of results needed for a healthy run')
    parser.add_argument('--strict', action='store_true', help='Require every result (same as --min-ratio 1)')
    parser.add_argument('--init-only', action='store_true', help='Create a fresh ledger and exit')
    parser.add_argument('--summary-only', action='store_true', help='Skip scraping, only wait and report')
    parser.add_argument('--no-summary', action='store_true', help='Skip the summary')
    parser.add_argument('--no-color', action='store_true', help='Plain PASS/FAIL labels')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)
    if args.worker_count < 1 or not 0 <= args.worker_index < args.worker_count:
        parser.error('--worker-index must be between 0 and --worker-count - 1')
    return args


def build_settings(args):
    """Environment settings with command-line overrides applied."""
    settings = load_settings()
    if args.team:
        settings['team'] = args.team.upper()
    if args.ledger:
        settings['results_file'] = args.ledger
    if args.reuse_ledger:
        settings['reuse_ledger'] = True
    if args.headed:
        settings['headless'] = False
    if args.workers:
        settings['workers'] = args.workers
    if args.max_wait is not None:
        settings['max_wait'] = args.max_wait
    if args.min_ratio is not None:
        settings['min_ratio'] = args.min_ratio
    if args.strict:
        settings['min_ratio'] = 1.0
    return settings


def main(argv=None, driver_factory=None):
    args = parse_args(argv)
    once_filter = setup_logging(args.verbose)
    try:
        return run(args, driver_factory)
    finally:
        release_logging(once_filter)


def run(args, driver_factory=None):
    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    ledger_path = settings['results_file']

    if args.init_only:
        initialize_ledger(ledger_path)
        return 0

    logger.info("=" * 60)
    logger.info(f"NBA 3PM CHECK - {team_name(settings['team']).upper()}")
    logger.info("=" * 60)

    try:
        players = get_players_with_cache(settings['api_key'], settings['team'])
    except (ConfigurationError, RosterError) as e:
        logger.error(f"Error fetching {team_name(settings['team'])} players: {e}")
        return 1

    logger.info(f"Setting up evaluation for {len(players)} players", extra={'once': True})

    if not args.summary_only:
        # Shard processes share one ledger; only a single-process run wipes it on its own
        fresh = args.fresh or (not settings['reuse_ledger'] and args.worker_count == 1)
        ensure_ledger(ledger_path, fresh=fresh)

        assigned = select_shard(players, args.worker_index, args.worker_count)
        if driver_factory is None:
            driver_factory = functools.partial(create_driver, headless=settings['headless'])

        print(f"\n===== STARTING TEST WITH {len(assigned)} {team_name(settings['team']).upper()} PLAYERS =====\n")
        run_players(
            assigned,
            ledger_path,
            driver_factory,
            workers=settings['workers'],
            color=not args.no_color,
        )

    if args.no_summary:
        return 0

    ledger = wait_for_results(ledger_path, len(players), max_wait=settings['max_wait'])
    summary = build_summary(ledger, len(players), min_ratio=settings['min_ratio'])
    print_summary(summary)
    return 0 if summary['healthy'] else 1


if __name__ == '__main__':
    sys.exit(main())
