"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from collections.abc import Iterator

from .api import WikiAPI
from .domain import IndexableDocument, WikiSource
from .environment import ConfigurationError, ConnectionProperties
from .fetcher import DEFAULT_CHUNK_SIZE, BatchFetcher
from .lister import PageLister
from .mapper import DocumentMapper

LOGGER = logging.getLogger(__name__)


class WikiHarvester:
    """
    Collects documents from a single Azure DevOps wiki.

    Each call to `harvest` opens a dedicated connection, lists every page of the wiki, and only then starts retrieving
    page content.
    """

    source: WikiSource
    connection: ConnectionProperties
    chunk_size: int

    def __init__(self, source: WikiSource, connection: ConnectionProperties, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.source = source
        self.connection = connection
        self.chunk_size = chunk_size

    def harvest(self) -> Iterator[IndexableDocument]:
        """
        Yields a document for each wiki page retrieved successfully.

        :raises ConfigurationError: Raised when the wiki or the connection is not fully specified.
        :raises ListingError: Raised when the list of pages cannot be retrieved.
        """

        missing = self.source.missing_fields()
        if not self.connection.base_url:
            missing.append("baseUrl")
        if not self.connection.token:
            missing.append("token")
        if missing:
            raise ConfigurationError(missing)

        mapper = DocumentMapper(self.source.title_suffix)
        with WikiAPI(self.connection, self.source, pool_size=self.chunk_size) as session:
            pages = PageLister(session, self.source).list_all_pages()
            LOGGER.info("Indexing %d Azure DevOps wiki documents from %s", len(pages), self.source.name)

            fetcher = BatchFetcher(session, self.source, chunk_size=self.chunk_size)
            count = 0
            for page in fetcher.iter_pages([page.id for page in pages]):
                yield mapper.map(page)
                count += 1

        LOGGER.info("Done indexing %d Azure DevOps wiki documents from %s (%d failed)", count, self.source.name, len(fetcher.failed))
