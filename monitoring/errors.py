"""
Monitoring Errors

Exception taxonomy shared by the browser session, the listing scraper,
the price history store and the monitor scheduler.
"""


class MonitorError(Exception):
    """Base class for every error raised by the monitoring package."""


class ProvisioningError(MonitorError):
    """The chromedriver binary could not be located or downloaded."""


class SessionError(MonitorError):
    """A browser session could not be opened or died mid-use."""


class NavigationError(MonitorError):
    """A card page failed to load."""


class ElementNotFound(MonitorError):
    """A selector matched nothing, or the matched element could not be used."""


class ParseError(MonitorError):
    """Price or quantity text could not be turned into a number."""


class PersistenceError(MonitorError):
    """A tabular file is unreadable, corrupt or could not be written."""
