"""Exceptions raised while building the 3PM report.

Run-level errors (configuration, roster) stop the run before any player is
evaluated. Player-level errors only fail the player they belong to.
"""


class ScraperError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(ScraperError):
    """A required setting, such as the API key, is missing."""


class RosterError(ScraperError):
    """The roster could not be fetched or understood."""


class NetworkError(RosterError):
    pass


class ParseError(RosterError):
    pass


class NoActivePlayersError(RosterError):
    pass


class PlayerEvaluationError(ScraperError):
    """Extraction failed for a single player."""


class NavigationTimeoutError(PlayerEvaluationError):
    pass


class TableNotFoundError(PlayerEvaluationError):
    pass


class ColumnNotFoundError(PlayerEvaluationError):
    pass


class NoValidSamplesError(PlayerEvaluationError):
    pass


class LedgerWriteContentionError(ScraperError):
    """The ledger stayed locked or unwritable after every retry."""
