"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

import requests

from .domain import IndexableDocument, WikiSource
from .environment import CONFIG_SECTION_NAME, ArgumentError, ConfigurationError, ConnectionProperties, WikiError
from .fetcher import DEFAULT_CHUNK_SIZE
from .harvester import WikiHarvester

LOGGER = logging.getLogger(__name__)

# fields each wiki source must specify, reported when no source is configured at all
_SOURCE_FIELDS = ["organization", "project", "wikiIdentifier"]


def _collect(harvester: WikiHarvester) -> list[IndexableDocument]:
    return list(harvester.harvest())


class WikiCollator:
    """
    Collects documents from several Azure DevOps wikis concurrently.

    A wiki that cannot be listed contributes no documents but does not stop documents of other wikis from being
    collected. Missing configuration, on the other hand, stops the entire run before any request is made.

    :param sources: Wikis to collect documents from.
    :param connection: Azure DevOps service URL and credentials shared by all wikis.
    :param chunk_size: Maximum number of concurrent page requests against a single wiki.
    :param max_workers: Maximum number of wikis to collect concurrently (default: all of them).
    """

    sources: list[WikiSource]
    connection: ConnectionProperties
    chunk_size: int
    max_workers: int | None

    def __init__(
        self,
        sources: Iterable[WikiSource],
        connection: ConnectionProperties,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: int | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ArgumentError(f"chunk size must be a positive integer; got: {chunk_size}")
        if max_workers is not None and max_workers < 1:
            raise ArgumentError(f"maximum number of workers must be a positive integer; got: {max_workers}")

        self.sources = list(sources)
        self.connection = connection
        self.chunk_size = chunk_size
        self.max_workers = max_workers

    def validate(self) -> list[str]:
        "Returns the configuration name of every required option that is missing."

        missing: list[str] = []
        if not self.connection.base_url:
            missing.append(f"{CONFIG_SECTION_NAME}.baseUrl")
        if not self.connection.token:
            missing.append(f"{CONFIG_SECTION_NAME}.token")

        if not self.sources:
            missing.extend(f"{CONFIG_SECTION_NAME}.{field}" for field in _SOURCE_FIELDS)
        elif len(self.sources) == 1:
            missing.extend(f"{CONFIG_SECTION_NAME}.{field}" for field in self.sources[0].missing_fields())
        else:
            for index, source in enumerate(self.sources):
                missing.extend(f"{CONFIG_SECTION_NAME}.wikis[{index}].{field}" for field in source.missing_fields())

        return missing

    def run(self) -> Iterator[IndexableDocument]:
        """
        Yields documents from all wikis, in no particular order.

        Configuration is validated when this method is called, not when the first document is requested. Wikis still
        being collected are abandoned when the returned iterator is closed.

        :raises ConfigurationError: Raised before any request is made when required options are missing.
        """

        missing = self.validate()
        if missing:
            for name in missing:
                LOGGER.error("No %s configured", name)
            raise ConfigurationError(missing)

        LOGGER.info("Collecting documents from %d Azure DevOps wikis", len(self.sources))
        return self._collect_all()

    def _collect_all(self) -> Iterator[IndexableDocument]:
        executor = ThreadPoolExecutor(max_workers=self.max_workers or len(self.sources), thread_name_prefix="wiki")
        try:
            futures: dict[Future[list[IndexableDocument]], WikiSource] = {
                executor.submit(_collect, WikiHarvester(source, self.connection, chunk_size=self.chunk_size)): source
                for source in self.sources
            }

            succeeded = 0
            for future in as_completed(futures):
                source = futures[future]
                try:
                    documents = future.result()
                except (WikiError, requests.RequestException) as e:
                    LOGGER.error("Failed to collect documents from wiki %s: %s", source.name, e)
                    continue

                succeeded += 1
                yield from documents

            LOGGER.info("Collected documents from %d of %d Azure DevOps wikis", succeeded, len(self.sources))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
