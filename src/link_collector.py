import time
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException

try:
    from .errors import LinkCollectionError
    from .navigation import NavigationExpander
    from .sidebar import SeleniumNavigationTree
except ImportError:
    from errors import LinkCollectionError
    from navigation import NavigationExpander
    from sidebar import SeleniumNavigationTree


class LinkCollector:
    """Collects the ordered list of documentation page URLs from the sidebar."""

    INITIAL_SETTLE = 2

    def __init__(self, session, config: Dict[str, Any],
                 logger: Optional[logging.Logger] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session
        self.config = config
        self.selectors = config['selectors']['sidebar']
        self.timeouts = config['timeouts']
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep

    @property
    def driver(self):
        return self.session.driver

    def _extract_links(self) -> List[str]:
        """Return hrefs of all content links in document order, first occurrence only."""
        soup = BeautifulSoup(self.driver.page_source, 'html.parser')
        current_url = self.driver.current_url

        links = []
        seen = set()
        for anchor in soup.select(self.selectors['link']):
            href = anchor.get('href')
            if not href:
                continue
            url = urljoin(current_url, href)
            if url in seen:
                self.logger.debug(f"Duplicate sidebar link ignored: {url}")
                continue
            seen.add(url)
            links.append(url)
        return links

    def _safe_extract_links(self) -> List[str]:
        try:
            return self._extract_links()
        except Exception as e:
            self.logger.warning(f"Failed to extract links from sidebar: {e}")
            return []

    def collect_links_alternative(self) -> List[str]:
        """Collect all links when the sidebar structure is different."""
        links = self._safe_extract_links()
        self.logger.info(f"Collected {len(links)} links (alternative method)")
        return links

    def _sidebar_present(self) -> bool:
        try:
            WebDriverWait(self.driver, self.timeouts['page_load']).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, self.selectors['level1']))
            )
            return True
        except TimeoutException:
            return False

    def _create_expander(self) -> NavigationExpander:
        tree = SeleniumNavigationTree(self.driver, self.config)
        return NavigationExpander(tree, self.config, logger=self.logger, sleep=self.sleep)

    def collect_all_links(self, base_url: str) -> List[str]:
        """
        Collect all page links from the sidebar

        Args:
            base_url: Base URL of the documentation site

        Returns:
            Page URLs in sidebar order
        """
        self.logger.info("Waiting for page to load...")
        try:
            self.session.load(base_url)
        except Exception as e:
            raise LinkCollectionError(f"Failed to load {base_url} for link collection", e) from e

        self.sleep(self.INITIAL_SETTLE)
        self.logger.debug("Page loaded, starting link collection")

        if not self._sidebar_present():
            self.logger.warning("Sidebar items not found, trying alternative approach")
            return self.collect_links_alternative()

        section_count = len(self.driver.find_elements(By.CSS_SELECTOR, self.selectors['level1']))
        self.logger.info(f"Found {section_count} top-level sidebar sections")

        self._create_expander().expand_all()

        # Wait a bit more for all menus to be fully expanded
        self.sleep(self.timeouts['animation'] * 2)

        self.logger.debug("Extracting links from sidebar...")
        links = self._safe_extract_links()
        self.logger.info(f"Collected {len(links)} links from sidebar")
        return links
