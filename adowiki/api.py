"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import TypeVar
from urllib.parse import urlencode, urlparse, urlunparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .api_types import WikiApiVersion, WikiPage, WikiPagesBatch, WikiPagesBatchRequest, WikiPagesBatchResponse
from .domain import WikiSource
from .environment import ArgumentError, ConnectionProperties
from .serializer import JsonType, json_to_object, object_to_json_payload

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

CONTINUATION_TOKEN_HEADER = "x-ms-continuationtoken"

# number of concurrent requests against a single wiki
DEFAULT_POOL_SIZE = 100

DEFAULT_TIMEOUT = 60.0


def build_url(base_url: str, query: dict[str, str] | None = None) -> str:
    "Builds a URL with scheme, host, port, path and query string parameters."

    scheme, netloc, path, params, query_str, fragment = urlparse(base_url)

    if params:
        raise ValueError("expected: url with no parameters")
    if query_str:
        raise ValueError("expected: url with no query string")
    if fragment:
        raise ValueError("expected: url with no fragment")

    url_parts = (scheme, netloc, path, None, urlencode(query) if query else None, None)
    return urlunparse(url_parts)


def build_base_url(base_url: str, organization: str, project: str, wiki_identifier: str) -> str:
    "Builds the root URL of the REST API endpoints of a single wiki."

    return f"{base_url}/{organization}/{project}/_apis/wiki/wikis/{wiki_identifier}"


def _retry_strategy() -> Retry:
    # batch listing is a read-only operation despite using POST
    return Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "POST"],
        raise_on_status=False,
    )


class WikiAPI:
    """
    Represents an active connection to a single Azure DevOps wiki.
    """

    connection: ConnectionProperties
    source: WikiSource
    pool_size: int
    session: "WikiSession | None" = None

    def __init__(self, connection: ConnectionProperties, source: WikiSource, *, pool_size: int = DEFAULT_POOL_SIZE) -> None:
        self.connection = connection
        self.source = source
        self.pool_size = pool_size

    def __enter__(self) -> "WikiSession":
        if not self.connection.base_url:
            raise ArgumentError("Azure DevOps base URL not specified")
        if not self.connection.token:
            raise ArgumentError("Azure DevOps personal access token not specified")
        if not self.source.organization or not self.source.project or not self.source.wiki_identifier:
            raise ArgumentError(f"Azure DevOps wiki not fully specified: {self.source.name}")

        session = requests.Session()
        session.auth = ("", self.connection.token)
        session.headers.update({"Content-Type": "application/json"})
        if self.connection.headers:
            session.headers.update(self.connection.headers)

        adapter = HTTPAdapter(max_retries=_retry_strategy(), pool_connections=1, pool_maxsize=self.pool_size)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        self.session = WikiSession(
            session,
            api_url=build_base_url(
                self.connection.base_url,
                self.source.organization,
                self.source.project,
                self.source.wiki_identifier,
            ),
        )
        return self.session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None


class WikiSession:
    """
    Information about an open session to an Azure DevOps wiki.

    Safe to share between threads issuing concurrent read requests.
    """

    _session: requests.Session
    _api_url: str
    _timeout: float

    def __init__(self, session: requests.Session, *, api_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._session = session
        self._api_url = api_url
        self._timeout = timeout

    @property
    def api_url(self) -> str:
        return self._api_url

    def close(self) -> None:
        self._session.close()

    def _build_url(self, path: str, query: dict[str, str] | None = None) -> str:
        """
        Builds a full URL for invoking the wiki REST API.

        :param path: Path of API endpoint to invoke.
        :param query: Query parameters to pass to the API endpoint.
        :returns: A full URL.
        """

        return build_url(f"{self._api_url}{path}", query)

    def _get(self, path: str, response_type: type[T], *, query: dict[str, str] | None = None) -> T:
        "Retrieves an object via the Azure DevOps REST API."

        url = self._build_url(path, query)
        response = self._session.get(url, headers={"Accept": "application/json"}, timeout=self._timeout, verify=True)
        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)
        response.raise_for_status()
        return json_to_object(response_type, response.json())

    def _post(self, path: str, body: object, *, query: dict[str, str] | None = None) -> tuple[JsonType, Mapping[str, str]]:
        "Invokes an Azure DevOps REST API endpoint, returning both the response payload and headers."

        url = self._build_url(path, query)
        data = object_to_json_payload(body)
        response = self._session.post(url, data=data, headers={"Accept": "application/json"}, timeout=self._timeout, verify=True)
        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)
        response.raise_for_status()
        return response.json(), response.headers

    def get_pages_batch(self, continuation_token: str | None = None) -> WikiPagesBatch:
        """
        Retrieves a single batch of wiki page summaries.

        :param continuation_token: Opaque token returned with the previous batch, or `None` for the first batch.
        :returns: Page summaries and the token to pass to retrieve the next batch (if any).
        """

        payload, headers = self._post(
            "/pagesBatch",
            WikiPagesBatchRequest(continuationToken=continuation_token),
            query={"api-version": WikiApiVersion.PAGES_BATCH.value},
        )
        data = json_to_object(WikiPagesBatchResponse, payload)
        next_token = headers.get(CONTINUATION_TOKEN_HEADER) or None
        return WikiPagesBatch(pages=data.value, continuation_token=next_token)

    def get_page(self, page_id: int) -> WikiPage:
        """
        Retrieves wiki page details and content.

        :param page_id: The wiki page ID.
        :returns: Wiki page info and content.
        """

        path = f"/pages/{page_id}"
        return self._get(path, WikiPage, query={"includeContent": "true", "api-version": WikiApiVersion.PAGES.value})
