"""
Shared fixtures for the NBA 3PM check tests.

No test touches the network or a real browser: the roster API is mocked with
`responses` and Selenium is replaced by FakeDriver, which serves saved HTML
through page_source.
"""

import os
import sys

import pytest
from selenium.common.exceptions import NoSuchElementException

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from scrapers.nba import roster  # noqa: E402
from scrapers.nba.stats_scraper import COOKIE_BUTTON, PROFILE_TAB  # noqa: E402

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')

# Waits collapsed to zero so optional elements time out immediately
FAST_TIMEOUTS = {
    'page_load': 5,
    'dom_ready': 0,
    'cookie_banner': 0,
    'profile_tab': 0,
    'profile_settle': 0,
    'render_delay': 0,
}


def load_fixture(name):
    with open(os.path.join(FIXTURES_DIR, name), 'r', encoding='utf-8') as f:
        return f.read()


class FakeElement:
    def __init__(self):
        self.clicks = 0

    def is_displayed(self):
        return True

    def is_enabled(self):
        return True

    def click(self):
        self.clicks += 1


class FakeDriver:
    """Just enough of a WebDriver for stats_scraper."""

    def __init__(self, page_source='', elements=None, ready_state='complete', get_error=None):
        self.page_source = page_source
        self.elements = elements or {}
        self.ready_state = ready_state
        self.get_error = get_error
        self.visited = []
        self.page_load_timeout = None
        self.quit_called = False

    def set_page_load_timeout(self, timeout):
        self.page_load_timeout = timeout

    def get(self, url):
        if self.get_error is not None:
            raise self.get_error
        self.visited.append(url)

    def execute_script(self, script):
        return self.ready_state

    def find_element(self, by, value):
        element = self.elements.get((by, value))
        if element is None:
            raise NoSuchElementException(f"no element {by}={value}")
        return element

    def quit(self):
        self.quit_called = True


@pytest.fixture(autouse=True)
def clear_roster_cache():
    roster.clear_cache()
    yield
    roster.clear_cache()


@pytest.fixture
def profile_html():
    return load_fixture('player_profile.html')


@pytest.fixture
def ledger_path(tmp_path):
    return str(tmp_path / 'results.json')


@pytest.fixture
def cookie_button():
    return FakeElement()


@pytest.fixture
def profile_tab():
    return FakeElement()


@pytest.fixture
def driver_with_banner(profile_html, cookie_button, profile_tab):
    return FakeDriver(
        profile_html,
        elements={COOKIE_BUTTON: cookie_button, PROFILE_TAB: profile_tab},
    )


@pytest.fixture
def sample_roster_response():
    """Trimmed SportsData.io Players/DAL response."""
    return [
        {
            'PlayerID': 20000441,
            'FirstName': 'Luka',
            'LastName': 'Doncic',
            'Status': 'Active',
            'Team': 'DAL',
            'Position': 'PG',
            'NbaDotComPlayerID': 1629029,
        },
        {
            'PlayerID': 20000571,
            'FirstName': 'Kyrie',
            'LastName': 'Irving',
            'Status': 'Active',
            'Team': 'DAL',
            'Position': 'PG',
            'NbaDotComPlayerID': 202681,
        },
        {
            'PlayerID': 20002084,
            'FirstName': 'Dereck',
            'LastName': 'Lively II',
            'Status': 'Active',
            'Team': 'DAL',
            'Position': 'C',
            'NbaDotComPlayerID': 1641726,
        },
        {
            'PlayerID': 20001234,
            'FirstName': 'Retired',
            'LastName': 'Guard',
            'Status': 'Inactive',
            'Team': 'DAL',
            'Position': 'SG',
            'NbaDotComPlayerID': 1600001,
        },
    ]
