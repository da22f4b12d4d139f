"""
Collect Azure DevOps wiki pages as searchable documents.

Enumerates every page of one or more Azure DevOps wikis via the paginated REST API, retrieves the content of each page
in bounded concurrent batches, and emits a normalized document (title, location, text) for each page retrieved.
"""

from ._version import __version__

__all__ = ["__version__"]

__author__ = "Levente Hunyadi"
__copyright__ = "Copyright 2022-2026, Levente Hunyadi"
__license__ = "MIT"
__maintainer__ = "Levente Hunyadi"
__status__ = "Production"
