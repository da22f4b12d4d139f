"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import os
from urllib.parse import urlparse

CONFIG_SECTION_NAME = "azureDevOpsWikiCollator"


class ArgumentError(ValueError):
    "Raised when wrong arguments are passed to a function call."


class WikiError(RuntimeError):
    "Raised when collecting documents from an Azure DevOps wiki fails."


class ConfigurationError(WikiError):
    """
    Raised when required configuration options are missing.

    :param missing: Name of each configuration option not supplied.
    """

    missing: list[str]

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"missing configuration options: {', '.join(missing)}")
        self.missing = missing


class ListingError(WikiError):
    "Raised when the list of pages cannot be retrieved from a wiki."

    source: str

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class FetchError(WikiError):
    "Raised when a single wiki page cannot be retrieved."

    source: str
    page_id: int

    def __init__(self, source: str, page_id: int, message: str) -> None:
        super().__init__(f"{source}: page {page_id}: {message}")
        self.source = source
        self.page_id = page_id


def _validate_base_url(base_url: str | None) -> str | None:
    if not base_url:
        return None

    scheme, netloc, _, _, _, _ = urlparse(base_url)
    if scheme not in ("http", "https") or not netloc:
        raise ArgumentError(f"Azure DevOps base URL must be an absolute http(s) URL: {base_url}")

    return base_url.rstrip("/")


class ConnectionProperties:
    """
    Properties related to connecting to Azure DevOps, shared by all wikis to collect.

    Missing values are not an error at this stage; they are reported together with any other missing option when a
    collection run is validated.

    :param base_url: Azure DevOps service URL, e.g. `https://dev.azure.com`.
    :param token: Personal access token.
    :param headers: Additional HTTP headers to pass to Azure DevOps REST API calls.
    """

    base_url: str | None
    token: str | None
    headers: dict[str, str] | None

    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        opt_base_url = base_url or os.getenv("AZURE_DEVOPS_BASE_URL")
        opt_token = token or os.getenv("AZURE_DEVOPS_TOKEN")

        self.base_url = _validate_base_url(opt_base_url)
        self.token = opt_token
        self.headers = headers
