"""
=============================================================================
NBA.COM PLAYER PROFILE SCRAPER
=============================================================================

PURPOSE:
    Opens a player's NBA.com profile in Chrome and reads the 3PM average
    from the "Last 5 Games" table.

FLOW:
    1. Load https://www.nba.com/player/{id} and wait for the DOM
    2. Accept the OneTrust cookie banner if it shows up
    3. Click the "Profile" tab if there is one
    4. Hand the rendered HTML to table_locator

    Steps 2 and 3 are optional; a page without the banner or the tab is
    scraped as is. Only a page that never loads is an error here. Everything
    after that is decided by table_locator.

Every player gets a driver of its own. Drivers are never shared between
workers.
"""

import logging
import time

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from scrapers.nba.config import BROWSER_TIMEOUTS, PROFILE_URL
from scrapers.nba.errors import NavigationTimeoutError
from scrapers.nba.table_locator import extract_average

logger = logging.getLogger(__name__)

COOKIE_BUTTON = (By.ID, 'onetrust-accept-btn-handler')
PROFILE_TAB = (By.XPATH, "//a[contains(normalize-space(.), 'Profile')]")

WAIT_POLL = 0.25


def create_driver(headless=True):
    """Start a Chrome driver set up like the other league scrapers."""
    options = Options()
    if headless:
        options.add_argument('--headless=new')
    options.add_argument('--no-sandbox')
    options.add_argument('--disable-dev-shm-usage')
    options.add_argument('--disable-blink-features=AutomationControlled')
    options.add_argument('--window-size=1920,1080')
    options.add_argument('--user-agent=Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36')
    options.add_experimental_option('excludeSwitches', ['enable-automation'])

    service = Service(ChromeDriverManager().install())
    driver = webdriver.Chrome(service=service, options=options)
    driver.execute_cdp_cmd('Page.addScriptToEvaluateOnNewDocument', {
        'source': 'Object.defineProperty(navigator, "webdriver", {get: () => undefined})'
    })
    return driver


def document_ready(driver):
    return driver.execute_script('return document.readyState') in ('interactive', 'complete')


def document_complete(driver):
    return driver.execute_script('return document.readyState') == 'complete'


def open_profile_page(driver, url, timeouts):
    """Navigate and wait for the DOM; both waits are hard limits."""
    driver.set_page_load_timeout(timeouts['page_load'])
    try:
        driver.get(url)
    except TimeoutException as e:
        raise NavigationTimeoutError(f"Timed out loading {url}") from e

    try:
        WebDriverWait(driver, timeouts['dom_ready'], poll_frequency=WAIT_POLL).until(document_ready)
    except TimeoutException as e:
        raise NavigationTimeoutError(f"Page never finished loading: {url}") from e


def dismiss_cookie_banner(driver, timeout):
    """Click the cookie consent button if it appears. Returns True if clicked."""
    try:
        button = WebDriverWait(driver, timeout, poll_frequency=WAIT_POLL).until(
            EC.element_to_be_clickable(COOKIE_BUTTON)
        )
        button.click()
        return True
    except WebDriverException:
        logger.debug("No cookie banner")
        return False


def open_profile_tab(driver, timeout, settle_timeout):
    """Click the Profile tab if present. Returns True if clicked."""
    try:
        tab = WebDriverWait(driver, timeout, poll_frequency=WAIT_POLL).until(
            EC.element_to_be_clickable(PROFILE_TAB)
        )
        tab.click()
    except WebDriverException:
        logger.debug("No Profile tab, assuming it is already active")
        return False

    try:
        WebDriverWait(driver, settle_timeout, poll_frequency=WAIT_POLL).until(document_complete)
    except TimeoutException:
        logger.debug("Profile tab still loading, reading the page anyway")
    return True


def fetch_three_point_average(driver, player, timeouts=None):
    """
    Average 3PM over a player's last 5 games, read from NBA.com.

    PARAMETERS:
        driver: a Selenium WebDriver owned by the caller
        player (dict): roster entry with at least 'name' and 'player_id'
        timeouts (dict, optional): overrides for BROWSER_TIMEOUTS

    RETURNS:
        float: the average

    RAISES:
        NavigationTimeoutError, TableNotFoundError, ColumnNotFoundError,
        NoValidSamplesError
    """
    timeouts = {**BROWSER_TIMEOUTS, **(timeouts or {})}
    url = PROFILE_URL.format(player_id=player['player_id'])

    logger.debug(f"Opening {url} for {player['name']}")
    open_profile_page(driver, url, timeouts)
    dismiss_cookie_banner(driver, timeouts['cookie_banner'])
    open_profile_tab(driver, timeouts['profile_tab'], timeouts['profile_settle'])

    # Stats widgets render after the load event
    if timeouts['render_delay']:
        time.sleep(timeouts['render_delay'])

    return extract_average(driver.page_source)
