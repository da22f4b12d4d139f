"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import enum
from dataclasses import dataclass


@enum.unique
class WikiApiVersion(enum.Enum):
    """
    Azure DevOps REST API version an HTTP request corresponds to.

    Batch listing of wiki pages is only available as a preview endpoint.
    """

    PAGES_BATCH = "6.0-preview.1"
    PAGES = "6.0"


@dataclass(frozen=True)
class WikiPagesBatchRequest:
    """
    Request body for listing wiki pages in batches.

    :param continuationToken: Token returned by the previous batch, or `None` to start from the first page.
    """

    continuationToken: str | None = None


@dataclass(frozen=True)
class WikiPageSummary:
    """
    Lightweight record of a wiki page returned by the batch listing endpoint.

    :param id: Wiki page ID.
    :param path: Path of the wiki page, e.g. `/Architecture/Overview`.
    """

    id: int
    path: str | None = None


@dataclass(frozen=True)
class WikiPagesBatchResponse:
    value: list[WikiPageSummary]


@dataclass(frozen=True)
class WikiPagesBatch:
    """
    A single batch of wiki page summaries.

    :param pages: Page summaries in the order returned by Azure DevOps.
    :param continuation_token: Opaque token to pass to retrieve the next batch, or `None` if this is the last batch.
    """

    pages: list[WikiPageSummary]
    continuation_token: str | None


@dataclass(frozen=True)
class WikiPage:
    """
    Holds wiki page details and content.

    :param id: Wiki page ID.
    :param path: Path of the wiki page, with segments separated by `/`.
    :param content: Raw Markdown content of the page.
    :param remoteUrl: Browser URL of the page.
    :param gitItemPath: Path of the Markdown file backing the page in the wiki Git repository.
    :param url: REST API URL of the page.
    :param order: Order of the page among its siblings.
    :param isParentPage: Whether the page has child pages.
    :param isNonConformant: Whether the page does not conform to the wiki's folder structure.
    """

    id: int
    path: str | None = None
    content: str | None = None
    remoteUrl: str | None = None
    gitItemPath: str | None = None
    url: str | None = None
    order: int | None = None
    isParentPage: bool | None = None
    isNonConformant: bool | None = None
