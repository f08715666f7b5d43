#!/usr/bin/env python3
"""
Export Exception Classes
"""

from typing import Optional


class ExportError(Exception):
    """Base exception for PDF export errors"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self):
        message = super().__str__()
        if self.cause is not None:
            return f"{message}: {self.cause}"
        return message

class ConnectivityError(ExportError):
    """Raised when the documentation site cannot be reached"""
    pass

class SidebarError(ExportError):
    """Raised when the navigation sidebar cannot be processed"""
    pass

class LinkCollectionError(ExportError):
    """Raised when page links cannot be collected at all"""
    pass

class PdfExportError(ExportError):
    """Raised when a single page cannot be rendered to PDF"""
    pass

class PdfMergeError(ExportError):
    """Raised when page PDFs cannot be merged into the output file"""
    pass
