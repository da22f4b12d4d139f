"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import typing
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from cattrs import BaseValidationError

from .domain import WikiSource
from .environment import CONFIG_SECTION_NAME, ArgumentError, ConnectionProperties
from .serializer import JsonType, json_to_object

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WikiConfig:
    organization: str | None = None
    project: str | None = None
    wikiIdentifier: str | None = None
    titleSuffix: str | None = None

    def to_source(self) -> WikiSource:
        return WikiSource(
            organization=self.organization,
            project=self.project,
            wiki_identifier=self.wikiIdentifier,
            title_suffix=self.titleSuffix,
        )


@dataclass(frozen=True)
class CollatorConfig(WikiConfig):
    """
    Configuration section for collecting documents from Azure DevOps wikis.

    Either a single wiki is given with `organization`, `project`, `wikiIdentifier` and `titleSuffix` directly in the
    section, or several wikis are listed under `wikis`.

    :param baseUrl: Azure DevOps service URL shared by all wikis.
    :param token: Personal access token shared by all wikis.
    :param wikis: Wikis to collect documents from.
    """

    baseUrl: str | None = None
    token: str | None = None
    wikis: list[WikiConfig] = field(default_factory=list)

    def sources(self) -> list[WikiSource]:
        "Returns the wikis to collect documents from, possibly none."

        if self.wikis:
            return [wiki.to_source() for wiki in self.wikis]

        source = self.to_source()
        if source == WikiSource():
            return []
        else:
            return [source]

    def connection(self) -> ConnectionProperties:
        return ConnectionProperties(base_url=self.baseUrl, token=self.token)


def parse_configuration(text: str) -> CollatorConfig:
    """
    Parses the collator configuration section from a YAML document.

    :param text: YAML document with a top-level `azureDevOpsWikiCollator` key.
    :returns: Configuration, with all fields unset if the section is absent.
    :raises ArgumentError: Raised when the document is not valid YAML or the section has an unexpected shape.
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ArgumentError(f"invalid YAML in configuration: {e}") from e

    if data is None:
        return CollatorConfig()
    if not isinstance(data, dict):
        raise ArgumentError("expected: YAML mapping at the top level of the configuration file")

    section = typing.cast(dict[str, JsonType], data).get(CONFIG_SECTION_NAME)
    if section is None:
        LOGGER.warning("No %s section in configuration", CONFIG_SECTION_NAME)
        return CollatorConfig()
    if not isinstance(section, dict):
        raise ArgumentError(f"expected: YAML mapping in the {CONFIG_SECTION_NAME} section of the configuration file")

    try:
        return json_to_object(CollatorConfig, section)
    except BaseValidationError as e:
        raise ArgumentError(f"invalid {CONFIG_SECTION_NAME} section in configuration: {e}") from e


def load_configuration(path: Path) -> CollatorConfig:
    "Loads the collator configuration section from a YAML file."

    with open(path, "r", encoding="utf-8") as f:
        return parse_configuration(f.read())
