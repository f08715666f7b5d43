#!/usr/bin/env python3
"""
Documentation Export Pipeline

Sequences link collection, per-page rendering and merging for one
(base URL, output path) pair. The browser session and the temporary
directory belong to the exporter for the whole run.
"""

import logging
from typing import Any, Dict, Optional

import requests

try:
    from .browser import BrowserSession
    from .errors import ConnectivityError, ExportError
    from .link_collector import LinkCollector
    from .page_exporter import PageExporter
    from .pdf_merger import PdfMerger
    from .utils import create_temp_directory, merge_config, remove_directory, resolve_output_path
except ImportError:
    from browser import BrowserSession
    from errors import ConnectivityError, ExportError
    from link_collector import LinkCollector
    from page_exporter import PageExporter
    from pdf_merger import PdfMerger
    from utils import create_temp_directory, merge_config, remove_directory, resolve_output_path


class DocsPdfExporter:
    """Exports a Docusaurus documentation site to a single PDF."""

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def _create_session(self) -> BrowserSession:
        return BrowserSession(self.config, logger=self.logger)

    def verify_site_running(self, url: str) -> None:
        """Fail fast when the documentation site does not answer."""
        self.logger.info(f"Checking if documentation site is running: {url}")
        try:
            with requests.Session() as http:
                response = http.get(url, timeout=self.config['timeouts']['page_load'])
                response.raise_for_status()
        except requests.RequestException as e:
            raise ConnectivityError(
                f"Failed to connect to documentation site at {url}. Make sure the server is running.", e
            ) from e
        self.logger.info("Documentation site is running")

    def export(self, url: str, output_path: str) -> str:
        """
        Export the documentation site to PDF

        Args:
            url: Base URL of the documentation site
            output_path: Path where to save the output PDF

        Returns:
            Path to the exported PDF file
        """
        temp_dir = None
        clean_temp_files = self.config['cleanup']['clean_temp_files']

        try:
            with self._create_session() as session:
                self.verify_site_running(url)

                full_path = resolve_output_path(output_path)['full_path']
                temp_dir = create_temp_directory(self.config['directories']['temp_base'])
                self.logger.debug(f"Working directory: {temp_dir}")

                # Step 1: Collect all links from sidebar
                links = LinkCollector(session, self.config, logger=self.logger).collect_all_links(url)

                # Step 2: Export each page to PDF
                exporter = PageExporter(session, self.config, logger=self.logger)
                exported_pages = exporter.export_pages(links, temp_dir, url)

                if not exported_pages:
                    raise ExportError("No pages were successfully exported")

                # Step 3: Merge all PDFs into one
                PdfMerger(self.config, logger=self.logger).merge(exported_pages, full_path)

            return full_path
        except ExportError as e:
            self.logger.error(f"Export failed: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Export failed: {e}")
            raise ExportError("Unexpected export failure", e) from e
        finally:
            if temp_dir:
                if clean_temp_files:
                    remove_directory(temp_dir)
                else:
                    self.logger.info(f"Temporary files kept in {temp_dir}")


def export_to_pdf(url: str, output_path: str, options: Optional[Dict[str, Any]] = None,
                  logger: Optional[logging.Logger] = None) -> str:
    """Export with ``options`` merged over the default configuration."""
    config = merge_config(options)
    return DocsPdfExporter(config, logger=logger).export(url, output_path)


def run(url: str, output_path: str, clean: bool = True) -> str:
    """Export with default settings, optionally keeping temporary files."""
    return export_to_pdf(url, output_path, {'cleanup': {'clean_temp_files': clean}})
