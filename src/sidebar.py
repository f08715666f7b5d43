#!/usr/bin/env python3
"""
Selenium bindings for the navigation capability used by NavigationExpander.

Docusaurus renders each sidebar category as an ``li`` carrying a
``theme-doc-sidebar-item-category-level-N`` class with a
``.menu__list-item-collapsible`` header. A collapsed category additionally
carries ``menu__list-item--collapsed``.
"""

from typing import Any, Dict, List

from selenium.webdriver.common.by import By
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC

try:
    from .navigation import NavigationControl, NavigationNode, NavigationTree
except ImportError:
    from navigation import NavigationControl, NavigationNode, NavigationTree


EXPAND_COLLAPSED_SCRIPT = """
const selectors = arguments[0];
const collapsibles = document.querySelectorAll(selectors.collapsed);
collapsibles.forEach((el) => {
  const button = el.querySelector(selectors.button) || el;
  if (button && typeof button.click === "function") {
    button.click();
  }
});
return collapsibles.length;
"""


def _class_name(selector: str) -> str:
    """Turn a single-class selector like ``.foo--bar`` into ``foo--bar``."""
    return selector.lstrip('.')


class SeleniumControl(NavigationControl):
    def __init__(self, driver, element: WebElement, timeouts: Dict[str, Any]):
        self.driver = driver
        self.element = element
        self.timeouts = timeouts

    def is_visible(self) -> bool:
        return self.element.is_displayed()

    def scroll_into_view(self) -> None:
        self.driver.execute_script(
            "arguments[0].scrollIntoView({block: 'center'});", self.element
        )
        WebDriverWait(self.driver, self.timeouts['scroll']).until(
            lambda _: self.element.is_displayed()
        )

    def click(self) -> None:
        WebDriverWait(self.driver, self.timeouts['click_retry']).until(
            EC.element_to_be_clickable(self.element)
        ).click()

    def force_click(self) -> None:
        ActionChains(self.driver).move_to_element(self.element).click().perform()

    def javascript_click(self) -> None:
        self.driver.execute_script(
            "if (arguments[0] instanceof HTMLElement) { arguments[0].click(); }",
            self.element
        )


class SeleniumNavigationNode(NavigationNode):
    """A ``.menu__list-item-collapsible`` header and its enclosing category item."""

    def __init__(self, driver, element: WebElement, level: int, config: Dict[str, Any]):
        self.driver = driver
        self.element = element
        self.level = level
        self.config = config
        self.selectors = config['selectors']['sidebar']

    def _container(self) -> WebElement:
        return self.element.find_element(By.XPATH, '..')

    def is_expanded(self) -> bool:
        item_class = self.element.get_attribute('class') or ''
        if _class_name(self.selectors['active']) in item_class.split():
            return True

        container_class = self._container().get_attribute('class') or ''
        return self.selectors['collapsed_class'] not in container_class.split()

    def _children(self) -> List[WebElement]:
        child_selector = '{} > {}'.format(
            self.selectors['category_level'].format(level=self.level + 1),
            self.selectors['collapsible'],
        )
        return self._container().find_elements(By.CSS_SELECTOR, child_selector)

    def child_count(self) -> int:
        return len(self._children())

    def child(self, index: int) -> NavigationNode:
        return SeleniumNavigationNode(self.driver, self._children()[index], self.level + 1, self.config)

    def control(self) -> NavigationControl:
        # Top-level categories toggle from their button, nested ones may only have a link
        selector = self.selectors['button']
        if self.level > 1:
            selector = f"{self.selectors['button']}, {self.selectors['menu_link']}"

        candidates = self.element.find_elements(By.CSS_SELECTOR, selector)
        target = candidates[0] if candidates else self.element
        return SeleniumControl(self.driver, target, self.config['timeouts'])


class SeleniumNavigationTree(NavigationTree):
    def __init__(self, driver, config: Dict[str, Any]):
        self.driver = driver
        self.config = config
        self.selectors = config['selectors']['sidebar']

    def _top_level(self) -> List[WebElement]:
        return self.driver.find_elements(By.CSS_SELECTOR, self.selectors['level1'])

    def top_level_count(self) -> int:
        return len(self._top_level())

    def top_level_node(self, index: int) -> NavigationNode:
        return SeleniumNavigationNode(self.driver, self._top_level()[index], 1, self.config)

    def expand_all_collapsed(self) -> None:
        self.driver.execute_script(EXPAND_COLLAPSED_SCRIPT, self.selectors)
