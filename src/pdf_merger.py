import os
import logging
from typing import Any, Dict, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.generic import Fit

try:
    from .errors import PdfMergeError
    from .models import ExportedPage
    from .outline import Outline, build_outline
    from .utils import ensure_directory
except ImportError:
    from errors import PdfMergeError
    from models import ExportedPage
    from outline import Outline, build_outline
    from utils import ensure_directory


class PdfMerger:
    """Merges per-page PDF files into one document with a bookmark outline."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        self.config = config or {}
        self.logger = logger or logging.getLogger(__name__)
        self.outline: Optional[Outline] = None

    def _writer_from(self, page_groups: List[list]) -> PdfWriter:
        writer = PdfWriter()
        for group in page_groups:
            for source_page in group:
                writer.add_page(source_page)
        return writer

    def _append_pages(self, pages: List[ExportedPage]) -> Tuple[PdfWriter, List[ExportedPage]]:
        """Copy every artifact into a new writer and rewrite page indices to absolute offsets.

        An artifact is copied completely or not at all. Returns the writer and
        the pages whose artifacts were merged.
        """
        writer = PdfWriter()
        merged = []
        copied = []
        page_offset = 0

        for i, page in enumerate(pages):
            self.logger.debug(f"Merging file {i + 1}/{len(pages)}: {page.path}")
            try:
                source_pages = list(PdfReader(page.path).pages)
                for source_page in source_pages:
                    writer.add_page(source_page)
            except Exception as e:
                self.logger.warning(f"Failed to merge file {page.path}: {e}")
                if len(writer.pages) > page_offset:
                    # Drop the pages this artifact copied before failing
                    writer = self._writer_from(copied)
                continue

            page.page_index = page_offset
            page_offset += len(source_pages)
            merged.append(page)
            copied.append(source_pages)

        return writer, merged

    def build_outline(self, pages: List[ExportedPage]) -> Outline:
        entries = [
            (heading.level, heading.text, page.page_index)
            for page in pages
            for heading in page.headings
        ]
        return build_outline(entries)

    def _embed_outline(self, writer: PdfWriter, outline: Outline) -> None:
        references = {}
        for node in outline.walk():
            parent = references.get(id(node.parent)) if node.parent is not None else None
            references[id(node)] = writer.add_outline_item(
                node.title, node.page_index, parent=parent, fit=Fit.fit()
            )

    def create_outlines(self, writer: PdfWriter, pages: List[ExportedPage]) -> Optional[Outline]:
        """Build and embed bookmarks. Returns None when there is nothing to embed."""
        outline = self.build_outline(pages)
        if outline.count == 0:
            self.logger.debug("No bookmarks to create")
            return None

        self._embed_outline(writer, outline)
        self.logger.info(f"Created {outline.count} root bookmarks with hierarchy")
        return outline

    def _write(self, writer: PdfWriter, output_path: str) -> None:
        ensure_directory(os.path.dirname(os.path.abspath(output_path)))
        partial_path = f"{output_path}.part"
        try:
            with open(partial_path, 'wb') as f:
                writer.write(f)
            os.replace(partial_path, output_path)
        finally:
            if os.path.exists(partial_path):
                os.remove(partial_path)

    def merge(self, pages: List[ExportedPage], output_path: str) -> str:
        """
        Merge exported pages into a single PDF with bookmarks

        Args:
            pages: Exported pages in final reading order
            output_path: Path where to save the merged PDF

        Returns:
            Path to the merged PDF file
        """
        if not pages:
            raise PdfMergeError("No source files provided for merging")

        self.logger.info(f"Starting PDF merge of {len(pages)} files")
        self.outline = None

        writer, merged = self._append_pages(pages)
        if not merged:
            raise PdfMergeError("None of the source files could be merged")

        try:
            self.outline = self.create_outlines(writer, merged)
        except Exception as e:
            # Bookmarks are optional: start over without them
            self.logger.warning(f"Failed to create bookmarks, continuing without them: {e}")
            self.outline = None
            writer, merged = self._append_pages(merged)

        try:
            self._write(writer, output_path)
        except Exception as e:
            raise PdfMergeError(f"Failed to write merged PDF to {output_path}", e) from e

        self.logger.info(f"PDF merge successful. Output file: {output_path}")
        return output_path
