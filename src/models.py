from dataclasses import dataclass, field
from typing import List


@dataclass
class PageHeading:
    """A heading found in a rendered page, in document order."""
    level: int
    text: str
    anchor_id: str = ""


@dataclass
class ExportedPage:
    """A page rendered to its own PDF file.

    ``page_index`` starts as the position among successful exports and is
    rewritten during merging to the page's absolute offset in the output.
    """
    path: str
    headings: List[PageHeading] = field(default_factory=list)
    url: str = ""
    page_index: int = 0
