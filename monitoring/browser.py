"""
Browser Automation Session

Wraps one Selenium Chrome driver behind a small set of primitives
(navigate, find, click, read text/attributes, quit) so the listing scraper
never touches Selenium exceptions directly.
"""

import logging
import os

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    NoSuchElementException,
    StaleElementReferenceException,
    WebDriverException,
)
from webdriver_manager.chrome import ChromeDriverManager

from monitoring.errors import (
    ElementNotFound,
    NavigationError,
    ProvisioningError,
    SessionError,
)

logger = logging.getLogger(__name__)

_UNUSABLE_ELEMENT_ERRORS = (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
)


class DriverProvisioner:
    """
    Makes a chromedriver binary available.

    An explicit path wins when it exists; otherwise webdriver-manager downloads
    (or reuses its cached copy of) the driver matching the installed Chrome.
    """

    def __init__(self, driver_path=None):
        self.driver_path = driver_path

    def ensure_available(self):
        """
        Returns:
            str: Path to a usable chromedriver binary

        Raises:
            ProvisioningError: If no driver could be found or downloaded
        """
        if self.driver_path:
            if os.path.exists(self.driver_path):
                logger.info(f"ChromeDriver already present at {self.driver_path}")
                return self.driver_path
            logger.warning(f"Configured ChromeDriver not found at {self.driver_path}, downloading")

        try:
            path = ChromeDriverManager().install()
        except Exception as e:
            raise ProvisioningError(f"Could not download ChromeDriver: {e}") from e
        logger.info(f"ChromeDriver ready at {path}")
        return path


def build_chrome_options(headless=True):
    chrome_options = Options()
    if headless:
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--disable-gpu")
    chrome_options.add_argument("--no-sandbox")
    chrome_options.add_argument("--disable-dev-shm-usage")
    chrome_options.add_argument("--window-size=1920,1080")
    return chrome_options


def open_session(settings, provisioner=None):
    """
    Open a fresh browser session.

    Args:
        settings (Settings): Runtime settings (headless flag, driver path)
        provisioner (DriverProvisioner, optional): Driver source override

    Returns:
        AutomationSession: A session owned by the caller

    Raises:
        ProvisioningError: If the driver binary is unavailable
        SessionError: If Chrome could not be started
    """
    provisioner = provisioner or DriverProvisioner(settings.chromedriver_path)
    driver_path = provisioner.ensure_available()

    try:
        driver = webdriver.Chrome(
            service=Service(driver_path),
            options=build_chrome_options(headless=settings.headless),
        )
    except WebDriverException as e:
        raise SessionError(f"Could not start Chrome session: {e}") from e
    return AutomationSession(driver)


class AutomationSession:
    """One interactive browser client. Not safe to share between threads."""

    def __init__(self, driver):
        self.driver = driver

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.quit()

    def navigate(self, url):
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise NavigationError(f"Could not load {url}: {e}") from e

    def find_one(self, selector, within=None):
        """Return the first element matching a CSS selector, or None."""
        scope = within if within is not None else self.driver
        try:
            return scope.find_element(By.CSS_SELECTOR, selector)
        except NoSuchElementException:
            return None
        except StaleElementReferenceException:
            return None
        except WebDriverException as e:
            raise SessionError(f"Lookup of '{selector}' failed: {e}") from e

    def find_many(self, selector, within=None):
        """Return every element matching a CSS selector, in document order."""
        scope = within if within is not None else self.driver
        try:
            return scope.find_elements(By.CSS_SELECTOR, selector)
        except StaleElementReferenceException:
            return []
        except WebDriverException as e:
            raise SessionError(f"Lookup of '{selector}' failed: {e}") from e

    def click(self, element):
        try:
            element.click()
        except _UNUSABLE_ELEMENT_ERRORS as e:
            raise ElementNotFound(f"Element could not be clicked: {e}") from e
        except WebDriverException as e:
            raise SessionError(f"Click failed: {e}") from e

    def text(self, element):
        try:
            return element.text or ""
        except StaleElementReferenceException:
            return ""
        except WebDriverException as e:
            raise SessionError(f"Reading text failed: {e}") from e

    def attribute(self, element, name):
        try:
            return element.get_attribute(name)
        except StaleElementReferenceException:
            return None
        except WebDriverException as e:
            raise SessionError(f"Reading attribute '{name}' failed: {e}") from e

    def quit(self):
        try:
            self.driver.quit()
        except Exception as e:
            logger.debug(f"Error closing browser session: {e}")
