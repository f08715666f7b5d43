"""
docexport - export a Docusaurus documentation site to a single bookmarked PDF
"""

__version__ = "1.0.0"
