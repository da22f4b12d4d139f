"""
Unit tests for collecting documents from several wikis.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import threading
import time
import unittest
from typing import Any
from unittest.mock import MagicMock, Mock, patch

from adowiki.collator import WikiCollator
from adowiki.domain import IndexableDocument, WikiSource
from adowiki.environment import ArgumentError, ConfigurationError, ConnectionProperties
from tests.utility import BASE_URL, FakeWiki, TypedTestCase

CONNECTION = ConnectionProperties(base_url=BASE_URL, token="secret")


class TestValidation(TypedTestCase):
    def setUp(self) -> None:
        self.env = patch.dict("os.environ", {}, clear=True)
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()

    def test_valid(self) -> None:
        collator = WikiCollator([WikiSource("contoso", "Platform", "Platform.wiki")], CONNECTION)
        self.assertListEqual(collator.validate(), [])

    def test_no_sources(self) -> None:
        collator = WikiCollator([], CONNECTION)
        self.assertListEqual(
            collator.validate(),
            [
                "azureDevOpsWikiCollator.organization",
                "azureDevOpsWikiCollator.project",
                "azureDevOpsWikiCollator.wikiIdentifier",
            ],
        )

    def test_nothing_configured(self) -> None:
        collator = WikiCollator([], ConnectionProperties())
        self.assertEqual(len(collator.validate()), 5)

    def test_missing_project(self) -> None:
        collator = WikiCollator([WikiSource(organization="contoso", wiki_identifier="Platform.wiki")], CONNECTION)
        self.assertListEqual(collator.validate(), ["azureDevOpsWikiCollator.project"])

    def test_empty_string_is_missing(self) -> None:
        collator = WikiCollator([WikiSource("contoso", "", "Platform.wiki")], CONNECTION)
        self.assertListEqual(collator.validate(), ["azureDevOpsWikiCollator.project"])

    def test_every_missing_field_reported(self) -> None:
        collator = WikiCollator(
            [
                WikiSource("contoso", "Platform", "Platform.wiki"),
                WikiSource(organization="contoso"),
                WikiSource(project="Data", wiki_identifier="Data.wiki"),
            ],
            ConnectionProperties(base_url=BASE_URL),
        )
        self.assertListEqual(
            collator.validate(),
            [
                "azureDevOpsWikiCollator.token",
                "azureDevOpsWikiCollator.wikis[1].project",
                "azureDevOpsWikiCollator.wikis[1].wikiIdentifier",
                "azureDevOpsWikiCollator.wikis[2].organization",
            ],
        )

    @patch("adowiki.api.requests.Session")
    def test_run_aborts_before_network(self, mock_session_class: Mock) -> None:
        collator = WikiCollator(
            [WikiSource("contoso", "Platform", "Platform.wiki"), WikiSource(organization="contoso", wiki_identifier="Data.wiki")],
            CONNECTION,
        )

        with self.assertLogs("adowiki.collator", level="ERROR") as logs:
            with self.assertRaises(ConfigurationError) as context:
                list(collator.run())

        self.assertListEqual(context.exception.missing, ["azureDevOpsWikiCollator.wikis[1].project"])
        self.assertEqual(len(logs.records), 1)
        mock_session_class.assert_not_called()

    @patch("adowiki.api.requests.Session")
    def test_run_without_sources(self, mock_session_class: Mock) -> None:
        with self.assertLogs("adowiki.collator", level="ERROR") as logs:
            with self.assertRaises(ConfigurationError) as context:
                list(WikiCollator([], CONNECTION).run())

        self.assertEqual(len(context.exception.missing), 3)
        self.assertEqual(len(logs.records), 3)
        mock_session_class.assert_not_called()

    def test_invalid_max_workers(self) -> None:
        with self.assertRaises(ArgumentError):
            WikiCollator([], CONNECTION, max_workers=0)


class TestCollection(TypedTestCase):
    @patch("adowiki.api.requests.Session")
    def test_failing_source_is_isolated(self, mock_session_class: Mock) -> None:
        wiki = FakeWiki(
            {"data": [([5], None)]},
            {5: {"id": 5, "path": "/Data/Model", "content": "model", "remoteUrl": "u5"}},
            failing_listings=["platform"],
        )
        mock_session_class.side_effect = lambda: wiki.session()

        collator = WikiCollator(
            [WikiSource("platform", "Platform", "Platform.wiki"), WikiSource("data", "Data", "Data.wiki")],
            CONNECTION,
        )
        with self.assertLogs("adowiki.collator", level="ERROR") as logs:
            documents = list(collator.run())

        self.assertListEqual(documents, [IndexableDocument(title="Model", location="u5", text="model")])
        self.assertTrue(any("platform/Platform/Platform.wiki" in line for line in logs.output))

    @patch("adowiki.api.requests.Session")
    def test_all_sources_fail(self, mock_session_class: Mock) -> None:
        wiki = FakeWiki({}, {}, failing_listings=["platform", "data"])
        mock_session_class.side_effect = lambda: wiki.session()

        collator = WikiCollator(
            [WikiSource("platform", "Platform", "Platform.wiki"), WikiSource("data", "Data", "Data.wiki")],
            CONNECTION,
        )
        with self.assertLogs("adowiki.collator", level="ERROR") as logs:
            documents = list(collator.run())

        self.assertListEqual(documents, [])
        self.assertEqual(len(logs.records), 2)

    @patch("adowiki.api.requests.Session")
    def test_documents_from_all_sources(self, mock_session_class: Mock) -> None:
        wiki = FakeWiki(
            {"platform": [([1, 2], None)], "data": [([3], "more"), ([4], None)]},
            {
                1: {"id": 1, "path": "/Intro"},
                2: {"id": 2, "path": "/Design"},
                3: {"id": 3, "path": "/Model"},
                4: {"id": 4, "path": "/Schema"},
            },
        )
        sessions: list[Mock] = []

        def new_session() -> Mock:
            session = wiki.session()
            sessions.append(session)
            return session

        mock_session_class.side_effect = new_session

        collator = WikiCollator(
            [
                WikiSource("platform", "Platform", "Platform.wiki", title_suffix=" (Platform)"),
                WikiSource("data", "Data", "Data.wiki", title_suffix=" (Data)"),
            ],
            CONNECTION,
        )
        documents = list(collator.run())

        self.assertListEqual(
            sorted(document.title for document in documents),
            ["Design (Platform)", "Intro (Platform)", "Model (Data)", "Schema (Data)"],
        )
        # each wiki has a dedicated connection
        self.assertEqual(len(sessions), 2)
        for session in sessions:
            session.close.assert_called_once()


class TimedWiki(FakeWiki):
    "Records how many wikis are being listed at the same time."

    def __init__(self, *args: Any, delay: float = 0.1, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.delay = delay
        self.lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def post(self, url: str, data: bytes, **kwargs: Any) -> MagicMock:
        with self.lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self.lock:
            self.active -= 1
        return super().post(url, data, **kwargs)


class BlockedWiki(FakeWiki):
    "Holds back the listing of organization `slow` until released."

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.release = threading.Event()

    def post(self, url: str, data: bytes, **kwargs: Any) -> MagicMock:
        if "/slow/" in url:
            self.release.wait(10.0)
        return super().post(url, data, **kwargs)


class TestConcurrency(TypedTestCase):
    SOURCES = [
        WikiSource("platform", "Platform", "Platform.wiki"),
        WikiSource("data", "Data", "Data.wiki"),
        WikiSource("infra", "Infra", "Infra.wiki"),
    ]

    def _wiki(self) -> TimedWiki:
        return TimedWiki(
            {"platform": [([1], None)], "data": [([2], None)], "infra": [([3], None)]},
            {1: {"id": 1, "path": "/Intro"}, 2: {"id": 2, "path": "/Model"}, 3: {"id": 3, "path": "/Network"}},
        )

    @patch("adowiki.api.requests.Session")
    def test_sources_overlap(self, mock_session_class: Mock) -> None:
        wiki = self._wiki()
        mock_session_class.side_effect = lambda: wiki.session()

        documents = list(WikiCollator(self.SOURCES, CONNECTION).run())

        self.assertEqual(len(documents), 3)
        self.assertGreater(wiki.max_active, 1)

    @patch("adowiki.api.requests.Session")
    def test_max_workers(self, mock_session_class: Mock) -> None:
        wiki = self._wiki()
        mock_session_class.side_effect = lambda: wiki.session()

        documents = list(WikiCollator(self.SOURCES, CONNECTION, max_workers=1).run())

        self.assertEqual(len(documents), 3)
        self.assertEqual(wiki.max_active, 1)

    @patch("adowiki.api.requests.Session")
    def test_close_does_not_wait(self, mock_session_class: Mock) -> None:
        wiki = BlockedWiki(
            {"fast": [([1], None)], "slow": [([2], None)]},
            {1: {"id": 1, "path": "/Intro"}, 2: {"id": 2, "path": "/Model"}},
        )
        self.addCleanup(wiki.release.set)
        mock_session_class.side_effect = lambda: wiki.session()

        documents = WikiCollator(
            [WikiSource("fast", "Fast", "Fast.wiki"), WikiSource("slow", "Slow", "Slow.wiki")],
            CONNECTION,
        ).run()
        self.assertEqual(next(documents).title, "Intro")

        start = time.monotonic()
        documents.close()
        self.assertLess(time.monotonic() - start, 5.0)

    @patch("adowiki.api.requests.Session")
    def test_validation_is_eager(self, mock_session_class: Mock) -> None:
        with self.assertLogs("adowiki.collator", level="ERROR"):
            with self.assertRaises(ConfigurationError):
                WikiCollator([WikiSource(organization="contoso")], CONNECTION).run()

        mock_session_class.assert_not_called()


if __name__ == "__main__":
    unittest.main()
