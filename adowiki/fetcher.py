"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import requests
from cattrs import BaseValidationError

from .api import WikiSession
from .api_types import WikiPage
from .domain import WikiSource
from .environment import ArgumentError, FetchError

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of retrieving a single page, either the page or the reason of failure.

    :param page_id: Wiki page ID requested.
    :param page: Page details and content if the page has been retrieved.
    :param error: Reason of failure if the page could not be retrieved.
    """

    page_id: int
    page: WikiPage | None = None
    error: FetchError | None = None

    @property
    def succeeded(self) -> bool:
        return self.page is not None


def chunked(items: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    "Splits a sequence into consecutive chunks of at most the given size."

    for start in range(0, len(items), size):
        yield items[start : start + size]


class BatchFetcher:
    """
    Retrieves the content of wiki pages in chunks of concurrent requests.

    All requests in a chunk run concurrently, and the next chunk starts only when every request in the previous chunk
    has completed. A failing request has no effect on other requests; the page is logged and left out of the result.
    """

    _session: WikiSession
    _source: WikiSource
    _chunk_size: int
    failed: list[int]

    def __init__(self, session: WikiSession, source: WikiSource, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ArgumentError(f"chunk size must be a positive integer; got: {chunk_size}")

        self._session = session
        self._source = source
        self._chunk_size = chunk_size
        self.failed = []

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def _fetch(self, page_id: int) -> FetchOutcome:
        try:
            page = self._session.get_page(page_id)
        except (requests.RequestException, BaseValidationError) as e:
            return FetchOutcome(page_id, error=FetchError(self._source.name, page_id, str(e)))
        return FetchOutcome(page_id, page=page)

    def settle(self, chunk: Sequence[int]) -> list[FetchOutcome]:
        """
        Retrieves a chunk of pages concurrently, waiting for all requests to complete.

        :param chunk: Wiki page IDs to retrieve.
        :returns: Outcome of each request, in the same order as the page IDs.
        """

        if not chunk:
            return []

        with ThreadPoolExecutor(max_workers=min(len(chunk), self._chunk_size), thread_name_prefix="fetch") as executor:
            outcomes = list(executor.map(self._fetch, chunk))

        for outcome in outcomes:
            if outcome.error is not None:
                self.failed.append(outcome.page_id)
                LOGGER.error("Problem reading page with ID %d in wiki %s: %s", outcome.page_id, self._source.name, outcome.error)

        return outcomes

    def iter_pages(self, page_ids: Sequence[int]) -> Iterator[WikiPage]:
        """
        Retrieves pages chunk by chunk, yielding each page retrieved successfully.

        :param page_ids: Wiki page IDs to retrieve.
        """

        for chunk in chunked(page_ids, self._chunk_size):
            for outcome in self.settle(chunk):
                if outcome.page is not None:
                    yield outcome.page

    def fetch_all(self, page_ids: Sequence[int]) -> list[WikiPage]:
        """
        Retrieves all pages, leaving out those that could not be retrieved.

        :param page_ids: Wiki page IDs to retrieve.
        :returns: Pages retrieved successfully.
        """

        return list(self.iter_pages(page_ids))
