"""
Test configuration and shared fixtures for docexport tests
"""
import io
import pytest
import tempfile
import shutil
from pathlib import Path

from bs4 import BeautifulSoup
from pypdf import PdfWriter
from selenium.common.exceptions import NoSuchElementException, WebDriverException

from src.navigation import NavigationControl, NavigationNode, NavigationTree
from src.utils import get_default_config


def make_pdf_bytes(pages=1, width=600, height=800):
    """Build a PDF with blank pages"""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeControl(NavigationControl):
    """Clickable part of a FakeNode; records every interaction"""

    def __init__(self, node, visible=True, failing=(), scroll_reveals=False):
        self.node = node
        self.visible = visible
        self.failing = set(failing)
        self.scroll_reveals = scroll_reveals
        self.attempts = []

    def is_visible(self):
        return self.visible

    def scroll_into_view(self):
        self.attempts.append('scroll')
        if self.scroll_reveals:
            self.visible = True

    def _attempt(self, name):
        self.attempts.append(name)
        if name in self.failing:
            raise RuntimeError(f"{name} failed")
        self.node.expanded = True

    def click(self):
        self._attempt('click')

    def force_click(self):
        self._attempt('force_click')

    def javascript_click(self):
        self._attempt('javascript_click')


class FakeNode(NavigationNode):
    """Sidebar category whose links and sub-categories only show once expanded"""

    def __init__(self, title, links=(), children=(), expanded=False, visible=True,
                 failing=(), scroll_reveals=False):
        self.title = title
        self.links = list(links)
        self.children = list(children)
        self.expanded = expanded
        self._control = FakeControl(self, visible, failing, scroll_reveals)

    def is_expanded(self):
        return self.expanded

    def child_count(self):
        return len(self.children) if self.expanded else 0

    def child(self, index):
        if not self.expanded:
            raise IndexError("children are not rendered while collapsed")
        return self.children[index]

    def control(self):
        return self._control


class FakeTree(NavigationTree):
    """In-memory sidebar that can render itself as Docusaurus-like HTML"""

    def __init__(self, nodes, bulk_expands=False, bulk_fails=False):
        self.nodes = list(nodes)
        self.bulk_expands = bulk_expands
        self.bulk_fails = bulk_fails
        self.bulk_calls = 0

    def top_level_count(self):
        return len(self.nodes)

    def top_level_node(self, index):
        return self.nodes[index]

    def expand_all_collapsed(self):
        self.bulk_calls += 1
        if self.bulk_fails:
            raise WebDriverException("script error")
        if self.bulk_expands:
            # Only items currently rendered can be clicked
            for node in self._rendered_nodes():
                node.expanded = True

    def _rendered_nodes(self):
        pending = list(self.nodes)
        rendered = []
        while pending:
            node = pending.pop(0)
            rendered.append(node)
            if node.expanded:
                pending.extend(node.children)
        return rendered

    def visible_links(self):
        links = []

        def visit(node):
            if not node.expanded:
                return
            links.extend(node.links)
            for child in node.children:
                visit(child)

        for node in self.nodes:
            visit(node)
        return links

    def render_html(self):
        items = ''.join(
            f'<li class="theme-doc-sidebar-item-category theme-doc-sidebar-item-category-level-1">'
            f'<div class="menu__list-item-collapsible"><button></button></div></li>'
            for _ in self.nodes
        )
        anchors = ''.join(
            f'<li><a class="menu__link" href="{href}">{href}</a></li>'
            for href in self.visible_links()
        )
        return (
            '<html><body><nav class="menu"><ul>'
            f'{items}{anchors}'
            '<li><a class="menu__link menuExternalLink_abc" href="https://github.com/x">GitHub</a></li>'
            '</ul></nav></body></html>'
        )


class FakeElement:
    def __init__(self, tag):
        self.tag = tag


class FakeDriver:
    """WebDriver stand-in serving HTML per URL"""

    def __init__(self, pages, content_height=500):
        self.pages = pages
        self.content_height = content_height
        self.current_url = None
        self.scripts = []
        self.visited = []

    def get(self, url):
        if url not in self.pages:
            raise WebDriverException(f"net::ERR_NAME_NOT_RESOLVED {url}")
        self.visited.append(url)
        self.current_url = url

    @property
    def page_source(self):
        html = self.pages[self.current_url]
        return html() if callable(html) else html

    def find_elements(self, by, selector):
        soup = BeautifulSoup(self.page_source, 'html.parser')
        return [FakeElement(tag) for tag in soup.select(selector)]

    def find_element(self, by, selector):
        elements = self.find_elements(by, selector)
        if not elements:
            raise NoSuchElementException(selector)
        return elements[0]

    def execute_script(self, script, *args):
        self.scripts.append(script)
        if 'offsetHeight' in script:
            return self.content_height
        return None


class FakeSession:
    """BrowserSession stand-in around a FakeDriver"""

    def __init__(self, driver, pdf_pages=1):
        self.driver = driver
        self.pdf_pages = pdf_pages
        self.print_calls = []
        self.closed = False

    def load(self, url):
        self.driver.get(url)

    def print_to_pdf(self, options):
        self.print_calls.append(options)
        return make_pdf_bytes(self.pdf_pages)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)

@pytest.fixture
def sample_config(temp_dir):
    """Default configuration with short timeouts for tests"""
    config = get_default_config()
    config['timeouts'].update({
        'page_load': 0.1,
        'click_retry': 0.1,
        'animation': 0,
        'scroll': 0.1,
        'scroll_settle': 0.05,
        'sidebar_expansion': 0.3,
        'network_idle': 0.1,
    })
    config['directories']['temp_base'] = str(temp_dir / 'work')
    return config

@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested waits"""
    waits = []

    def sleep(seconds):
        waits.append(seconds)

    sleep.waits = waits
    return sleep

@pytest.fixture
def pdf_factory(temp_dir):
    """Write a PDF with the given number of blank pages and return its path"""
    counter = {'n': 0}

    def factory(pages=1, width=600):
        counter['n'] += 1
        path = temp_dir / f"artifact_{counter['n']}.pdf"
        path.write_bytes(make_pdf_bytes(pages, width=width))
        return str(path)

    return factory

@pytest.fixture
def fake_node():
    return FakeNode

@pytest.fixture
def fake_tree():
    return FakeTree

@pytest.fixture
def fake_driver():
    return FakeDriver

@pytest.fixture
def fake_session():
    return FakeSession

@pytest.fixture
def doc_page_html():
    """HTML of a documentation page with the given headings"""

    def build(*headings, cards=0):
        body = ''.join(
            f'<h{level} id="{text.lower().replace(" ", "-")}">{text}<a class="hash-link" href="#x">\u200b</a></h{level}>'
            for level, text in headings
        )
        if cards:
            grid = ''.join(
                '<article class="col docCardListItem_abc"><a href="/docs/x">Card</a></article>'
                for _ in range(cards)
            )
            body += f'<section class="row">{grid}</section>'
        return (
            '<html><body><div id="__docusaurus_skipToContent_fallback">'
            f'<article>{body}</article></div></body></html>'
        )

    return build
