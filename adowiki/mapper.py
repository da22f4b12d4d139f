"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from .api_types import WikiPage
from .domain import IndexableDocument

UNKNOWN_TITLE = "Unknown Title"


def title_from_path(path: str | None) -> str:
    "Derives a page title from the last non-empty segment of a wiki page path."

    if path is None:
        return UNKNOWN_TITLE

    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return UNKNOWN_TITLE

    return segments[-1]


class DocumentMapper:
    "Transforms wiki pages into documents to index."

    title_suffix: str | None

    def __init__(self, title_suffix: str | None = None) -> None:
        self.title_suffix = title_suffix

    def map(self, page: WikiPage) -> IndexableDocument:
        return IndexableDocument(
            title=f"{title_from_path(page.path)}{self.title_suffix or ''}",
            location=page.remoteUrl or "",
            text=page.content or "",
        )
