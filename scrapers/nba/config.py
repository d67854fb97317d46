"""
=============================================================================
NBA 3PM TRACKER - CONFIGURATION
=============================================================================

All settings come from the environment. A .env file in the working directory
is loaded first, so a local run only needs:

    API_KEY=your-sportsdata-key

OPTIONAL VARIABLES:
    NBA_TEAM          Team key for the roster endpoint (default: DAL)
    RESULTS_FILE      Path of the shared results ledger
    REUSE_LEDGER      true = keep an existing ledger instead of starting fresh
    HEADLESS          false = show the browser window
    WORKERS           Number of browser workers in this process
    MAX_WAIT          Seconds the summary waits for all results
    MIN_RESULT_RATIO  Share of expected results needed for a healthy run
"""

import os

from dotenv import load_dotenv

from scrapers.nba.errors import ConfigurationError

load_dotenv()

# Roster API (SportsData.io)
ROSTER_API = 'https://api.sportsdata.io/v3/nba/scores/json/Players'
DEFAULT_TEAM = 'DAL'
TEAM_NAMES = {
    'DAL': 'Dallas Mavericks',
}

# Target website
BASE_URL = 'https://www.nba.com'
PROFILE_URL = BASE_URL + '/player/{player_id}'

# Threshold for the 5-game 3PM average
THREE_POINT_THRESHOLD = 1.0
GAMES_WINDOW = 5

# Browser waits, in seconds
BROWSER_TIMEOUTS = {
    'page_load': 30,
    'dom_ready': 20,
    'cookie_banner': 3,
    'profile_tab': 3,
    'profile_settle': 15,
    'render_delay': 1,
}

# Ledger write retries
LEDGER_RETRY = {
    'attempts': 5,
    'backoff': 0.2,
    'stale_lock_after': 30,
}

# Summary polling
POLL_INTERVAL = 2
DEFAULT_MAX_WAIT = 120
DEFAULT_MIN_RATIO = 0.5

DEFAULT_RESULTS_FILE = os.path.join('output', 'json', 'results.json')

HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'application/json',
}

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def env_flag(name, default=False):
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def env_number(name, cast, default):
    """Read a number from the environment; ConfigurationError names a bad value."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def load_settings():
    """Collect run settings from the environment into a dict."""
    return {
        'api_key': os.getenv('API_KEY', '').strip(),
        'team': os.getenv('NBA_TEAM', DEFAULT_TEAM).strip().upper() or DEFAULT_TEAM,
        'results_file': os.getenv('RESULTS_FILE', DEFAULT_RESULTS_FILE),
        'reuse_ledger': env_flag('REUSE_LEDGER'),
        'headless': env_flag('HEADLESS', default=True),
        'workers': env_number('WORKERS', int, 1),
        'max_wait': env_number('MAX_WAIT', float, DEFAULT_MAX_WAIT),
        'min_ratio': env_number('MIN_RESULT_RATIO', float, DEFAULT_MIN_RATIO),
    }


def team_name(team):
    """Display name for a team key, falling back to the key itself."""
    return TEAM_NAMES.get(team, team)
