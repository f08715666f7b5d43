#!/usr/bin/env python3
"""
Bookmark outline reconstruction.

Turns the flat sequence of (level, title, page index) headings collected
from all merged pages into a tree of BookmarkNode objects. A heading at
level L is attached to the most recent heading at level L-1 that is still
open; a heading whose parent level has no open node becomes a root.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

MAX_LEVEL = 6


@dataclass(eq=False)
class BookmarkNode:
    title: str
    page_index: int
    level: int
    parent: Optional['BookmarkNode'] = field(default=None, repr=False)
    prev: Optional['BookmarkNode'] = field(default=None, repr=False)
    next: Optional['BookmarkNode'] = field(default=None, repr=False)
    first: Optional['BookmarkNode'] = field(default=None, repr=False)
    last: Optional['BookmarkNode'] = field(default=None, repr=False)
    count: int = 0

    def children(self) -> Iterator['BookmarkNode']:
        """Iterate direct children through the first/next chain."""
        node = self.first
        while node is not None:
            yield node
            node = node.next

    def append_child(self, child: 'BookmarkNode') -> None:
        child.parent = self
        child.prev = self.last
        if self.last is not None:
            self.last.next = child
        else:
            self.first = child
        self.last = child
        self.count += 1


@dataclass
class Outline:
    """Top-level entries of a bookmark tree."""
    roots: List[BookmarkNode] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.roots)

    def walk(self) -> Iterator[BookmarkNode]:
        """Pre-order traversal: every parent is yielded before its children."""
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    def __len__(self):
        return sum(1 for _ in self.walk())


def build_outline(entries: Iterable[Tuple[int, str, int]]) -> Outline:
    """
    Build a bookmark tree from ``(level, title, page_index)`` tuples in final order.

    Levels outside 1..6 are clamped into that range.
    """
    outline = Outline()
    # open_nodes[L] is the most recent unclosed node at level L (index 0 unused)
    open_nodes: List[Optional[BookmarkNode]] = [None] * (MAX_LEVEL + 1)

    for level, title, page_index in entries:
        level = min(max(int(level), 1), MAX_LEVEL)
        node = BookmarkNode(title=title, page_index=page_index, level=level)

        parent = open_nodes[level - 1] if level > 1 else None
        if parent is not None:
            parent.append_child(node)
        else:
            if outline.roots:
                node.prev = outline.roots[-1]
                outline.roots[-1].next = node
            outline.roots.append(node)

        open_nodes[level] = node
        for deeper in range(level + 1, MAX_LEVEL + 1):
            open_nodes[deeper] = None

    return outline
