"""
=============================================================================
NBA ROSTER FETCHER
=============================================================================

Gets a team's players from the SportsData.io API and keeps the active ones.

DATA SOURCE:
    https://api.sportsdata.io/v3/nba/scores/json/Players/{team}?key={API_KEY}

    Each record looks like:
        {
            'PlayerID': 20000441,
            'FirstName': 'Luka',
            'LastName': 'Doncic',
            'Status': 'Active',
            'Team': 'DAL',
            'NbaDotComPlayerID': 1629029,
            ...
        }

The roster is fetched at most once per process and team; every worker thread
reuses the cached list.
"""

import logging
import threading

import requests

from scrapers.nba.config import HEADERS, ROSTER_API, team_name
from scrapers.nba.errors import (
    ConfigurationError,
    NetworkError,
    NoActivePlayersError,
    ParseError,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUS = 'Active'

_cache = {}
_cache_lock = threading.Lock()


def parse_player(record):
    """Turn one API record into the player dict used everywhere else."""
    first_name = (record.get('FirstName') or '').strip()
    last_name = (record.get('LastName') or '').strip()

    return {
        'first_name': first_name,
        'last_name': last_name,
        'name': f"{first_name} {last_name}".strip(),
        'player_id': record.get('NbaDotComPlayerID'),
        'status': record.get('Status'),
        'team': record.get('Team'),
    }


def fetch_active_players(api_key, team):
    """
    Fetch the roster for a team and return its active players.

    RAISES:
        ConfigurationError: api_key is empty
        NetworkError: the request failed or returned an error status
        ParseError: the body is not a JSON array
        NoActivePlayersError: nobody on the roster is active
    """
    if not api_key:
        logger.error("API_KEY is not defined. Set it in the environment or a .env file")
        raise ConfigurationError("API key is required")

    logger.info(f"Fetching {team_name(team)} players from SportsData API...", extra={'once': True})

    url = f"{ROSTER_API}/{team}"
    try:
        response = requests.get(url, params={'key': api_key}, headers=HEADERS, timeout=30)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(f"Roster request failed: {e}") from e

    try:
        records = response.json()
    except ValueError as e:
        raise ParseError(f"Roster response is not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise ParseError(f"Expected a JSON array of players, got {type(records).__name__}")

    players = []
    for record in records:
        if not isinstance(record, dict) or record.get('Status') != ACTIVE_STATUS:
            continue

        player = parse_player(record)
        if not player['player_id']:
            logger.warning(f"Skipping {player['name'] or 'unnamed player'}: no NBA.com player id")
            continue
        players.append(player)

    if not players:
        raise NoActivePlayersError(f"No active players found for {team}")

    logger.info(f"Found {len(players)} active {team_name(team)} players.", extra={'once': True})
    return players


def get_players_with_cache(api_key, team):
    """Return the active roster, fetching it only on the first call."""
    with _cache_lock:
        if team not in _cache:
            _cache[team] = fetch_active_players(api_key, team)
        return _cache[team]


def clear_cache():
    with _cache_lock:
        _cache.clear()
