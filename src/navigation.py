#!/usr/bin/env python3
"""
Navigation Expansion

Opens every collapsible item of a documentation sidebar so that all page
links are present in the live document. The traversal works against the
small capability interface below; ``sidebar.py`` binds it to Selenium.
"""

import time
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

try:
    from .errors import SidebarError
except ImportError:
    from errors import SidebarError


class NavigationControl(ABC):
    """The clickable part of a navigation item."""

    @abstractmethod
    def is_visible(self) -> bool:
        pass

    @abstractmethod
    def scroll_into_view(self) -> None:
        pass

    @abstractmethod
    def click(self) -> None:
        """Regular click, honouring visibility and occlusion checks."""
        pass

    @abstractmethod
    def force_click(self) -> None:
        """Pointer click at the element position, skipping actionability checks."""
        pass

    @abstractmethod
    def javascript_click(self) -> None:
        """Dispatch ``click()`` on the element from script."""
        pass


class NavigationNode(ABC):
    """A collapsible item of the navigation tree.

    Children are only discoverable once the node itself is expanded.
    """

    @abstractmethod
    def is_expanded(self) -> bool:
        pass

    @abstractmethod
    def child_count(self) -> int:
        pass

    @abstractmethod
    def child(self, index: int) -> 'NavigationNode':
        pass

    @abstractmethod
    def control(self) -> NavigationControl:
        pass


class NavigationTree(ABC):
    """Entry point into the live navigation structure."""

    @abstractmethod
    def top_level_count(self) -> int:
        pass

    @abstractmethod
    def top_level_node(self, index: int) -> NavigationNode:
        pass

    @abstractmethod
    def expand_all_collapsed(self) -> None:
        """Trigger every currently collapsed item in a single operation."""
        pass


CLICK_STRATEGIES: Dict[str, Callable[[NavigationControl], None]] = {
    'click': lambda control: control.click(),
    'force_click': lambda control: control.force_click(),
    'javascript_click': lambda control: control.javascript_click(),
}


class NavigationExpander:
    """Expands all sidebar menus using a bulk pass followed by a recursive walk."""

    EXPANSION_POLL = 0.1

    def __init__(self, tree: NavigationTree, config: Dict[str, Any],
                 logger: Optional[logging.Logger] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.tree = tree
        self.config = config
        self.timeouts = config['timeouts']
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep
        self.strategies = self._resolve_strategies(config['retry']['strategies'])

    def _resolve_strategies(self, names: List[str]) -> List[tuple]:
        strategies = []
        for name in names:
            if name not in CLICK_STRATEGIES:
                self.logger.warning(f"Unknown click strategy '{name}' ignored")
                continue
            strategies.append((name, CLICK_STRATEGIES[name]))
        return strategies

    def expand_all_in_bulk(self) -> bool:
        """Expand all collapsed menus with one script call (fastest method)."""
        try:
            self.tree.expand_all_collapsed()
            self.sleep(self.timeouts['animation'] * 2)
            self.logger.debug("Expanded all menus using JavaScript")
            return True
        except Exception as e:
            self.logger.warning(f"Could not expand menus using JavaScript, falling back to manual clicks: {e}")
            return False

    def click_with_retry(self, control: NavigationControl, level: int = 1, index: int = 0) -> None:
        """Try each configured click strategy in order until one succeeds.

        Raises SidebarError carrying the last error when every strategy fails.
        """
        if not self.strategies:
            raise ValueError("No click strategies configured")

        for position, (name, strategy) in enumerate(self.strategies):
            try:
                strategy(control)
                return
            except Exception as e:
                if position == len(self.strategies) - 1:
                    raise SidebarError(
                        f"All click strategies failed for level {level}, index {index}", e
                    ) from e
                self.logger.debug(f"Click strategy {name} failed, trying next...")

    def ensure_visible(self, control: NavigationControl) -> bool:
        """Scroll the control into view if needed and report whether it is visible."""
        if self._is_visible(control):
            return True
        try:
            control.scroll_into_view()
        except Exception as e:
            self.logger.debug(f"Scroll into view failed: {e}")
        self.sleep(self.timeouts['scroll_settle'])
        return self._is_visible(control)

    def _is_visible(self, control: NavigationControl) -> bool:
        try:
            return bool(control.is_visible())
        except Exception:
            return False

    def expand_node(self, node: NavigationNode, level: int, index: int) -> None:
        """Expand one node (if collapsed) and then all of its descendants."""
        if node.is_expanded():
            self.expand_children(node, level + 1)
            return

        control = node.control()
        if not self.ensure_visible(control):
            self.logger.warning(f"Skipping non-visible item at level {level}, index {index}")
            return

        self.click_with_retry(control, level, index)

        # Wait for menu to expand/animation to complete
        self.sleep(self.timeouts['animation'])
        if not self.wait_for_expansion(node):
            self.logger.debug(f"Item at level {level}, index {index} did not report expanded, continuing")
        self.expand_children(node, level + 1)

    def wait_for_expansion(self, node: NavigationNode) -> bool:
        """Poll until the node reports expanded or timeouts.sidebar_expansion elapses."""
        polls = max(1, int(self.timeouts['sidebar_expansion'] / self.EXPANSION_POLL))
        for _ in range(polls):
            try:
                if node.is_expanded():
                    return True
            except Exception as e:
                self.logger.debug(f"Could not read expansion state: {e}")
            self.sleep(self.EXPANSION_POLL)
        return False

    def expand_children(self, parent: NavigationNode, level: int) -> None:
        """Recursively expand the children of an expanded node."""
        try:
            count = parent.child_count()
        except Exception as e:
            self.logger.warning(f"Error reading sidebar items at level {level}: {e}")
            return

        for i in range(count):
            try:
                self.expand_node(parent.child(i), level, i)
            except Exception as e:
                # Continue with next item instead of failing completely
                self.logger.warning(f"Error processing sidebar item at level {level}, index {i}: {e}")

    def expand_all_manually(self) -> None:
        """Walk the top-level items in document order and expand each subtree."""
        try:
            count = self.tree.top_level_count()
        except Exception as e:
            self.logger.warning(f"Could not read top-level sidebar items: {e}")
            return

        self.logger.debug(f"Found {count} top-level sidebar items")

        for i in range(count):
            try:
                self.logger.debug(f"Processing top-level sidebar item {i}")
                self.expand_node(self.tree.top_level_node(i), 1, i)
            except Exception as e:
                self.logger.warning(f"Error processing top-level sidebar item {i}: {e}")

    def expand_all(self) -> None:
        """Expand all sidebar menus. Always returns after a best effort."""
        self.expand_all_in_bulk()
        self.expand_all_manually()
        # Catch items whose children only appeared after their siblings expanded
        self.expand_all_in_bulk()
        self.sleep(self.timeouts['animation'])
