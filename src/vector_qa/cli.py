"""Command-line entry point: provision the index, ingest documents, ask questions."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from vector_qa.config import Settings, get_settings
from vector_qa.factory import ServiceContainer
from vector_qa.ingestion.loader import load_directory

logger = logging.getLogger(__name__)


async def _provision(services: ServiceContainer, args: argparse.Namespace) -> int:
    await services.provision()
    return 0


async def _ingest(services: ServiceContainer, args: argparse.Namespace) -> int:
    directory = args.directory or services.settings.documents_dir
    documents = await asyncio.to_thread(load_directory, directory, glob=args.glob)
    if not args.skip_provision:
        await services.provision()
    report = await services.ingestion.ingest(services.settings.index_name, documents)
    print(report.model_dump_json(indent=2))
    return 0


async def _ask(services: ServiceContainer, args: argparse.Namespace) -> int:
    result = await services.query.answer(args.question)
    if not result.answered:
        print("No matching documents; the language model was not queried.")
        return 1
    print(result.answer)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vector-qa",
        description="Retrieval-augmented question answering over a vector index",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    provision = sub.add_parser("provision", help="Create the configured index if it is missing")
    provision.set_defaults(handler=_provision)

    ingest = sub.add_parser("ingest", help="Chunk, embed and upsert a directory of text files")
    ingest.add_argument("directory", nargs="?", help="Defaults to VECTOR_QA_DOCUMENTS_DIR")
    ingest.add_argument("--glob", default="**/*.txt", help="File pattern to load")
    ingest.add_argument(
        "--skip-provision",
        action="store_true",
        help="Assume the index already exists",
    )
    ingest.set_defaults(handler=_ingest)

    ask = sub.add_parser("ask", help="Answer a question from the indexed documents")
    ask.add_argument("question")
    ask.set_defaults(handler=_ask)

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    services = ServiceContainer(settings)
    try:
        return await args.handler(services, args)
    finally:
        await services.shutdown()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
