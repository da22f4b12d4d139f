"""
Collect Azure DevOps wiki pages as searchable documents.

Enumerates the pages of Azure DevOps wikis, retrieves their content, and writes a document with title, location and
text for each page as JSON Lines.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import argparse
import logging
import os.path
import sys
import typing
from io import StringIO
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Sequence

from . import __version__
from .collator import WikiCollator
from .compatibility import merged, override
from .config import CollatorConfig, load_configuration
from .domain import IndexableDocument
from .environment import ArgumentError, ConfigurationError, ConnectionProperties
from .fetcher import DEFAULT_CHUNK_SIZE
from .serializer import object_to_json_payload


class Arguments(argparse.Namespace):
    config: Path | None
    base_url: str | None
    token: str | None
    organization: str | None
    project: str | None
    wiki: str | None
    title_suffix: str | None
    chunk_size: int
    headers: dict[str, str] | None
    output: Path | None
    loglevel: str


class KwargsAppendAction(argparse.Action):
    """Append key-value pairs to a dictionary."""

    @override
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: None | str | Sequence[Any],
        option_string: str | None = None,
    ) -> None:
        try:
            d = dict(map(lambda x: x.split("=", 1), typing.cast(Sequence[str], values)))
        except ValueError:
            raise argparse.ArgumentError(
                self,
                f'Could not parse argument "{values}". It should follow the format: k1=v1 k2=v2 ...',
            ) from None
        setattr(namespace, self.dest, d)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected: positive integer; got: {value}")
    return number


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.prog = os.path.basename(os.path.dirname(__file__))
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="YAML configuration file with an `azureDevOpsWikiCollator` section listing wikis to collect.",
    )
    parser.add_argument(
        "--base-url",
        dest="base_url",
        help="Azure DevOps service URL, e.g. 'https://dev.azure.com' (default: environment variable AZURE_DEVOPS_BASE_URL).",
    )
    parser.add_argument(
        "--token",
        help="Azure DevOps personal access token (default: environment variable AZURE_DEVOPS_TOKEN).",
    )
    parser.add_argument("-o", "--organization", help="Azure DevOps organization of the wiki to collect.")
    parser.add_argument("-p", "--project", help="Azure DevOps project of the wiki to collect.")
    parser.add_argument("-w", "--wiki", help="Name or ID of the wiki to collect.")
    parser.add_argument("--title-suffix", dest="title_suffix", help="Text to append to the title of each document.")
    parser.add_argument(
        "--chunk-size",
        dest="chunk_size",
        type=positive_int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Maximum number of pages to retrieve concurrently from a wiki (default: {DEFAULT_CHUNK_SIZE}).",
    )
    parser.add_argument(
        "--headers",
        nargs="+",
        required=False,
        action=KwargsAppendAction,
        metavar="KEY=VALUE",
        help="Apply custom headers to all Azure DevOps API requests.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="File to write documents to as JSON Lines (default: standard output).",
    )
    parser.add_argument(
        "-l",
        "--loglevel",
        choices=[
            logging.getLevelName(level).lower()
            for level in (
                logging.DEBUG,
                logging.INFO,
                logging.WARN,
                logging.ERROR,
                logging.CRITICAL,
            )
        ],
        default=logging.getLevelName(logging.INFO),
        help="Use this option to set the log verbosity.",
    )
    return parser


def get_help() -> str:
    parser = get_parser()
    with StringIO() as buf:
        parser.print_help(file=buf)
        return buf.getvalue()


def write_documents(documents: Iterable[IndexableDocument], output: BinaryIO) -> int:
    "Writes each document as a single line of JSON, returning the number of documents written."

    count = 0
    for document in documents:
        output.write(object_to_json_payload(document))
        output.write(b"\n")
        count += 1
    output.flush()
    return count


def main(argv: Sequence[str] | None = None) -> None:
    parser = get_parser()
    args = Arguments()
    parser.parse_args(argv, namespace=args)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
    )

    try:
        file_config = load_configuration(args.config) if args.config is not None else CollatorConfig()
    except (OSError, ArgumentError) as e:
        parser.error(str(e))

    config = merged(
        CollatorConfig(
            organization=args.organization,
            project=args.project,
            wikiIdentifier=args.wiki,
            titleSuffix=args.title_suffix,
            baseUrl=args.base_url,
            token=args.token,
        ),
        file_config,
    )

    try:
        connection = ConnectionProperties(base_url=config.baseUrl, token=config.token, headers=args.headers)
    except ArgumentError as e:
        parser.error(str(e))

    collator = WikiCollator(config.sources(), connection, chunk_size=args.chunk_size)
    try:
        documents = collator.run()
    except ConfigurationError as e:
        parser.error(str(e))

    # output is truncated only once the configuration is known to be complete
    if args.output is not None:
        with open(args.output, "wb") as f:
            count = write_documents(documents, f)
    else:
        count = write_documents(documents, sys.stdout.buffer)

    logging.info("Wrote %d documents", count)


if __name__ == "__main__":
    main()
