#!/usr/bin/env python3
"""
Browser Session Module

Owns the single Chrome WebDriver used for a whole export run: navigation,
page readiness waiting and printing to PDF through the DevTools protocol.
"""

import base64
import logging
import time
from typing import Optional, Dict, Any

from selenium import webdriver
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.support.ui import WebDriverWait
from selenium.common.exceptions import TimeoutException, WebDriverException
from webdriver_manager.chrome import ChromeDriverManager

try:
    from .errors import ExportError
except ImportError:
    from errors import ExportError


RESOURCE_COUNT_SCRIPT = (
    "return window.performance && performance.getEntriesByType"
    " ? performance.getEntriesByType('resource').length : 0;"
)


class BrowserSession:
    """
    Scoped Chrome WebDriver.

    Use as a context manager so the browser is closed on every exit path.
    """

    IDLE_WINDOW = 0.5

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        self.config = config
        self.browser_config = config.get('browser', {})
        self.timeouts = config['timeouts']
        self.logger = logger or logging.getLogger(__name__)
        self.driver: Optional[webdriver.Remote] = None

    def _create_chrome_driver(self) -> webdriver.Chrome:
        """Create Chrome WebDriver"""
        options = ChromeOptions()

        # Set custom binary path if available
        if self.browser_config.get('chrome_binary_path'):
            options.binary_location = self.browser_config['chrome_binary_path']
            self.logger.info(f"Using Chrome binary: {self.browser_config['chrome_binary_path']}")

        if self.browser_config.get('headless', True):
            options.add_argument('--headless=new')

        options.add_argument('--no-sandbox')
        options.add_argument('--disable-dev-shm-usage')
        options.add_argument('--disable-gpu')
        options.add_argument('--disable-extensions')
        options.add_argument('--no-first-run')

        viewport = self.config.get('viewport', {})
        options.add_argument(f"--window-size={viewport.get('width', 1260)},{viewport.get('height', 400)}")

        if self.browser_config.get('user_agent'):
            options.add_argument(f'--user-agent={self.browser_config["user_agent"]}')

        self.logger.info("Using webdriver-manager to get compatible ChromeDriver")
        service = ChromeService(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=service, options=options)

        driver.set_page_load_timeout(self.timeouts['page_load'])
        return driver

    def start(self) -> webdriver.Remote:
        """Start the browser. Failure here is fatal for the run."""
        if self.driver:
            self.logger.debug("WebDriver already started")
            return self.driver

        try:
            self.driver = self._create_chrome_driver()
        except Exception as e:
            raise ExportError("Failed to start Chrome WebDriver", e) from e

        self.logger.info(f"Created Chrome WebDriver (headless={self.browser_config.get('headless', True)})")
        return self.driver

    def stop(self):
        """Stop the browser and cleanup resources"""
        if self.driver:
            try:
                self.logger.info("Closing browser...")
                self.driver.quit()
            except Exception as e:
                self.logger.warning(f"Error stopping WebDriver: {e}")
            finally:
                self.driver = None

    def __enter__(self):
        """Context manager entry - start browser"""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup browser"""
        self.stop()

    def load(self, url: str) -> None:
        """Navigate to ``url`` and wait until the page is quiet."""
        self.driver.get(url)
        self.wait_for_page_ready()

    def wait_for_page_ready(self) -> bool:
        """
        Wait for document load and then for resource loading to go quiet

        Returns:
            True if the page settled, False if a wait timed out
        """
        try:
            WebDriverWait(self.driver, self.timeouts['page_load']).until(
                lambda d: d.execute_script("return document.readyState") == "complete"
            )
        except TimeoutException:
            self.logger.warning(f"Page load timeout after {self.timeouts['page_load']}s")
            return False

        return self._wait_for_network_idle(self.timeouts['network_idle'])

    def _wait_for_network_idle(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        try:
            last_count = self.driver.execute_script(RESOURCE_COUNT_SCRIPT)
            while time.monotonic() < deadline:
                time.sleep(self.IDLE_WINDOW)
                count = self.driver.execute_script(RESOURCE_COUNT_SCRIPT)
                if count == last_count:
                    return True
                last_count = count
        except WebDriverException as e:
            self.logger.debug(f"Could not observe network activity: {e}")
            return False

        self.logger.debug(f"Network did not go idle within {timeout}s")
        return False

    def print_to_pdf(self, print_options: Dict[str, Any]) -> bytes:
        """Print the current page with Chrome DevTools ``Page.printToPDF``."""
        result = self.driver.execute_cdp_cmd('Page.printToPDF', print_options)
        return base64.b64decode(result['data'])
