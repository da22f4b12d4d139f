"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WikiSource:
    """
    Identifies an Azure DevOps wiki to collect documents from.

    :param organization: Azure DevOps organization.
    :param project: Project within the organization.
    :param wiki_identifier: Wiki name or ID within the project.
    :param title_suffix: Text appended verbatim to the title of each document.
    """

    organization: str | None = None
    project: str | None = None
    wiki_identifier: str | None = None
    title_suffix: str | None = None

    @property
    def name(self) -> str:
        return f"{self.organization}/{self.project}/{self.wiki_identifier}"

    def missing_fields(self) -> list[str]:
        "Returns the configuration name of each required field that is unset or empty."

        missing: list[str] = []
        if not self.organization:
            missing.append("organization")
        if not self.project:
            missing.append("project")
        if not self.wiki_identifier:
            missing.append("wikiIdentifier")
        return missing


@dataclass(frozen=True)
class IndexableDocument:
    """
    A document ready to be passed to a search index.

    :param title: Document title derived from the wiki page path.
    :param location: Browser URL of the wiki page, or an empty string.
    :param text: Raw content of the wiki page, or an empty string.
    """

    title: str
    location: str
    text: str
