"""
=============================================================================
LAST 5 GAMES TABLE LOCATOR
=============================================================================

Finds the "Last 5 Games" table on an NBA.com player profile and averages its
3PM column.

The profile markup does not tie the heading to its table in one stable way.
Seen so far:
    - the table itself contains the heading text
    - the table is a later sibling of the heading
    - the table is nested inside the element holding the heading
    - the table sits somewhere else inside the heading's parent

Each shape is a strategy: a plain function taking the element that carries
the marker text and returning a table Tag or None. Strategies are tried in
order, most specific first. If no marker element yields a table, every table
is checked for a 3PM header cell instead.

Everything here works on a parsed BeautifulSoup document, so it can be tested
against saved HTML without a browser.
"""

import logging
import re

from bs4 import BeautifulSoup

from scrapers.nba.config import GAMES_WINDOW
from scrapers.nba.errors import ColumnNotFoundError, NoValidSamplesError, TableNotFoundError

logger = logging.getLogger(__name__)

MARKER_TEXT = 'Last 5 Games'
STAT_COLUMN = '3PM'
CANDIDATE_TAGS = ['table', 'h2', 'h3', 'h4', 'div']

NUMBER_PATTERN = re.compile(r'^(\d+(?:\.\d*)?|\.\d+)')


# =============================================================================
# STRATEGIES FOR AN ELEMENT CONTAINING THE MARKER TEXT
# =============================================================================

def element_is_table(element):
    return element if element.name == 'table' else None


def next_sibling_table(element):
    return element.find_next_sibling('table')


def nested_table(element):
    return element.find('table')


def parent_table(element):
    if element.parent is None:
        return None
    return element.parent.find('table')


MARKER_STRATEGIES = [
    element_is_table,
    next_sibling_table,
    nested_table,
    parent_table,
]


# =============================================================================
# LOCATING THE TABLE
# =============================================================================

def find_marker_elements(soup, marker=MARKER_TEXT):
    """Candidate elements whose text contains the marker, in document order."""
    return [el for el in soup.find_all(CANDIDATE_TAGS) if marker in el.get_text()]


def table_from_marker(element, strategies=MARKER_STRATEGIES):
    for strategy in strategies:
        table = strategy(element)
        if table is not None:
            logger.debug(f"Table found via {strategy.__name__}")
            return table
    return None


def table_by_header(soup, column=STAT_COLUMN):
    """First table whose first row has a header cell mentioning the column."""
    for table in soup.find_all('table'):
        header_row = table.find('tr')
        if header_row is None:
            continue
        for header in header_row.find_all('th'):
            if column in header.get_text():
                return table
    return None


def locate_table(soup):
    """
    Pick the Last 5 Games table out of a parsed profile page.

    RAISES:
        TableNotFoundError: neither the marker text nor a 3PM header led to a table
    """
    for element in find_marker_elements(soup):
        table = table_from_marker(element)
        if table is not None:
            return table

    logger.debug(f"No '{MARKER_TEXT}' table, searching for any table with a {STAT_COLUMN} column...")
    table = table_by_header(soup)
    if table is None:
        raise TableNotFoundError(f"Could not find a table with {STAT_COLUMN} data")
    return table


# =============================================================================
# READING THE COLUMN
# =============================================================================

def find_column_index(table, column=STAT_COLUMN):
    for i, header in enumerate(table.find_all('th')):
        text = header.get_text().strip()
        if text == column or column in text:
            return i
    raise ColumnNotFoundError(f"Could not find {column} column in table")


def parse_stat_value(text):
    """Leading non-negative number of a cell's text, or None."""
    if text is None:
        return None
    match = NUMBER_PATTERN.match(text.strip())
    if not match:
        return None
    return float(match.group(1))


def body_rows(table):
    rows = table.select('tbody tr')
    if rows:
        return rows
    # html.parser does not add the tbody a browser would
    return [tr for tr in table.find_all('tr') if tr.find('td')]


def extract_samples(table, column_index, window=GAMES_WINDOW):
    """Parsed values of the column over the first `window` rows; bad cells skipped."""
    samples = []
    for i, row in enumerate(body_rows(table)[:window]):
        cells = row.find_all('td')
        if len(cells) <= column_index:
            continue
        value = parse_stat_value(cells[column_index].get_text())
        if value is None:
            continue
        logger.debug(f"Game {i + 1}: {value} {STAT_COLUMN}")
        samples.append(value)
    return samples


def average(samples):
    if not samples:
        raise NoValidSamplesError(f"No valid {STAT_COLUMN} values found")
    return sum(samples) / len(samples)


def extract_average(page):
    """
    Average 3PM over the last games shown on a profile page.

    PARAMETERS:
        page: HTML string or an already parsed BeautifulSoup document

    RETURNS:
        float: mean of the parseable 3PM cells in the first 5 rows
    """
    soup = page if isinstance(page, BeautifulSoup) else BeautifulSoup(page, 'html.parser')

    table = locate_table(soup)
    column_index = find_column_index(table)
    samples = extract_samples(table, column_index)
    result = average(samples)

    logger.debug(f"Average {STAT_COLUMN}: {result:.2f} ({len(samples)} games)")
    return result
