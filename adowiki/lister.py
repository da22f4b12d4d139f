"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from dataclasses import dataclass

import requests
from cattrs import BaseValidationError

from .api import WikiSession
from .api_types import WikiPagesBatch, WikiPageSummary
from .domain import WikiSource
from .environment import ListingError

LOGGER = logging.getLogger(__name__)


@dataclass
class ListingState:
    """
    Progress of enumerating the pages of a wiki.

    :param continuation_token: Token to present with the next request, or `None` for the first request.
    :param done: Whether the last batch has been received.
    """

    continuation_token: str | None = None
    done: bool = False

    def advance(self, batch: WikiPagesBatch) -> None:
        if batch.continuation_token is None:
            self.continuation_token = None
            self.done = True
        else:
            self.continuation_token = batch.continuation_token


class PageLister:
    "Enumerates all pages of a wiki by following continuation tokens."

    _session: WikiSession
    _source: WikiSource

    def __init__(self, session: WikiSession, source: WikiSource) -> None:
        self._session = session
        self._source = source

    def list_all_pages(self) -> list[WikiPageSummary]:
        """
        Retrieves the summary of every page in the wiki, in the order returned by Azure DevOps.

        :returns: Page summaries across all batches.
        :raises ListingError: Raised when any batch cannot be retrieved; no partial list is returned.
        """

        LOGGER.info("Retrieving list of all pages in wiki: %s", self._source.name)

        pages: list[WikiPageSummary] = []
        state = ListingState()
        while not state.done:
            try:
                batch = self._session.get_pages_batch(state.continuation_token)
            except (requests.RequestException, BaseValidationError) as e:
                raise ListingError(self._source.name, f"failed to list pages: {e}") from e

            LOGGER.debug("Received batch of %d pages (more: %s)", len(batch.pages), batch.continuation_token is not None)
            pages.extend(batch.pages)
            state.advance(batch)

        LOGGER.info("Found %d pages in wiki: %s", len(pages), self._source.name)
        return pages
