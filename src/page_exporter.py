import os
import re
import time
import logging
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup
from tqdm import tqdm

try:
    from .errors import PdfExportError
    from .models import ExportedPage, PageHeading
    from .utils import css_length_to_inches
except ImportError:
    from errors import PdfExportError
    from models import ExportedPage, PageHeading
    from utils import css_length_to_inches


ADD_STYLE_SCRIPT = """
const style = document.createElement('style');
style.type = 'text/css';
style.textContent = arguments[0];
document.head.appendChild(style);
"""

# Removes hrefs of links that point back into the documentation site; they
# cannot be followed inside a standalone PDF. The text is kept.
STRIP_INTERNAL_LINKS_SCRIPT = """
const baseUrl = arguments[0];
let baseHost = null;
try { baseHost = new URL(baseUrl).host; } catch (err) {}
let stripped = 0;
document.querySelectorAll('a[href]').forEach((link) => {
  const href = link.getAttribute('href');
  if (!href) return;
  let internal = false;
  if (href.startsWith('mailto:') || href.startsWith('tel:') ||
      href.startsWith('#') || href.startsWith('javascript:')) {
    internal = false;
  } else if (/^[a-z][a-z0-9+.-]*:/i.test(href) || href.startsWith('//')) {
    try {
      internal = new URL(href, document.baseURI).host === baseHost;
    } catch (err) {
      internal = true;
    }
  } else {
    internal = true;
  }
  if (internal) {
    link.removeAttribute('href');
    link.style.cursor = 'default';
    link.style.textDecoration = 'none';
    link.style.color = 'inherit';
    stripped += 1;
  }
});
return stripped;
"""

CONTENT_HEIGHT_SCRIPT = """
const element = document.querySelector(arguments[0]);
return element ? element.offsetHeight : null;
"""

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
ZERO_WIDTH = re.compile('[\u200b\u200c\u200d\ufeff]')


class PageExporter:
    """Renders documentation pages one by one into single-page PDF files."""

    STYLE_SETTLE = 0.2

    def __init__(self, session, config: Dict[str, Any],
                 logger: Optional[logging.Logger] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session
        self.config = config
        self.selectors = config['selectors']['content']
        self.pdf_config = config['pdf']
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep

    @property
    def driver(self):
        return self.session.driver

    def apply_custom_styles(self) -> None:
        """Inject the normalization stylesheet into the current page."""
        try:
            self.driver.execute_script(ADD_STYLE_SCRIPT, self.config['styles']['column_fix'])
            self.sleep(self.STYLE_SETTLE)
        except Exception as e:
            self.logger.warning(f"Failed to apply custom styles: {e}")

    def replace_internal_links(self, base_url: str) -> None:
        try:
            stripped = self.driver.execute_script(STRIP_INTERNAL_LINKS_SCRIPT, base_url)
            self.logger.debug(f"Removed {stripped} internal links")
        except Exception as e:
            self.logger.warning(f"Failed to replace internal links: {e}")

    def _soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.driver.page_source, 'html.parser')

    def _safe_soup(self) -> Optional[BeautifulSoup]:
        try:
            return self._soup()
        except Exception as e:
            self.logger.warning(f"Failed to read page source: {e}")
            return None

    def is_doc_list_page(self, soup: Optional[BeautifulSoup] = None) -> bool:
        """True when the page body is only a grid of document cards."""
        try:
            if soup is None:
                soup = self._soup()
            card_count = len(soup.select(self.selectors['doc_card_list_item']))
            content_count = len(soup.select(self.selectors['page_content']))
            return card_count > 0 and card_count == content_count
        except Exception as e:
            self.logger.debug(f"Error checking if page is doc list: {e}")
            return False

    def extract_headings(self, soup: Optional[BeautifulSoup] = None) -> List[PageHeading]:
        """Extract h1-h6 headings from the content region in document order."""
        try:
            if soup is None:
                soup = self._soup()
            article = self.selectors['article']
            selector = ', '.join(f"{article} {tag}" for tag in HEADING_TAGS)

            headings = []
            for element in soup.select(selector):
                text = ZERO_WIDTH.sub('', element.get_text())
                text = ' '.join(text.split())
                if not text:
                    continue
                anchor_id = element.get('id') or element.get('name') or ''
                headings.append(PageHeading(level=int(element.name[1]), text=text, anchor_id=anchor_id))
            return headings
        except Exception as e:
            self.logger.warning(f"Failed to extract headings: {e}")
            return []

    def calculate_page_height(self) -> int:
        """Content height plus padding in pixels, or the configured default."""
        default_height = self.pdf_config['default_height']
        try:
            height = self.driver.execute_script(CONTENT_HEIGHT_SCRIPT, self.selectors['skip_to_content'])
        except Exception as e:
            self.logger.warning(f"Failed to calculate page height, using default: {e}")
            return default_height

        if not height or height <= 0:
            self.logger.warning("Content region not measurable, using default page height")
            return default_height
        return int(height) + self.pdf_config['height_padding']

    def build_print_options(self, height: int) -> Dict[str, Any]:
        margins = self.pdf_config['margins']
        return {
            'paperWidth': css_length_to_inches(self.pdf_config['width']),
            'paperHeight': css_length_to_inches(height),
            'marginTop': css_length_to_inches(margins.get('top', 0)),
            'marginBottom': css_length_to_inches(margins.get('bottom', 0)),
            'marginLeft': css_length_to_inches(margins.get('left', 0)),
            'marginRight': css_length_to_inches(margins.get('right', 0)),
            'printBackground': self.pdf_config['print_background'],
            'preferCSSPageSize': self.pdf_config['prefer_css_page_size'],
            'generateTaggedPDF': self.pdf_config['tagged'],
        }

    def export_page(self, url: str, output_path: str, base_url: Optional[str] = None) -> Optional[ExportedPage]:
        """
        Export a single page to PDF

        Returns:
            The exported page, or None when the page is a documentation list page
        """
        try:
            self.logger.info(f"Exporting page: {url}")
            self.session.load(url)
            self.logger.debug(f"Page loaded: {url}")

            self.apply_custom_styles()

            if base_url:
                self.replace_internal_links(base_url)

            soup = self._safe_soup()
            if self.is_doc_list_page(soup):
                self.logger.warning(f"Skipping export for {url} (documentation list page)")
                return None

            headings = self.extract_headings(soup)
            height = self.calculate_page_height()

            pdf_bytes = self.session.print_to_pdf(self.build_print_options(height))
            with open(output_path, 'wb') as f:
                f.write(pdf_bytes)

            self.logger.info(f"Successfully exported: {url}")
            return ExportedPage(path=output_path, headings=headings, url=url)
        except Exception as e:
            raise PdfExportError(f"Failed to export page {url}", e) from e

    def export_pages(self, urls: List[str], output_dir: str, base_url: Optional[str] = None) -> List[ExportedPage]:
        """
        Export pages in order, skipping list pages and pages that fail.

        ``page_index`` counts successful exports only.
        """
        exported = []

        for i, url in enumerate(tqdm(urls, desc="Exporting pages", unit="page")):
            output_path = os.path.join(output_dir, f"{i}.pdf")
            try:
                page = self.export_page(url, output_path, base_url)
            except PdfExportError as e:
                # Continue with next page instead of failing completely
                self.logger.warning(f"Failed to export page {i} ({url}): {e}")
                continue

            if page is not None:
                page.page_index = len(exported)
                exported.append(page)

        self.logger.info(f"Exported {len(exported)} of {len(urls)} pages")
        return exported
