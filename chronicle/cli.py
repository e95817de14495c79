import argparse
import logging
import sys
from pathlib import Path

import httpx

from chronicle.core.observability import configure_logging
from chronicle.core.observability import init_sentry
from chronicle.errors import GitHubAPIError
from chronicle.errors import MissingCredentialError
from chronicle.errors import UpstreamQueryError
from chronicle.services.stats_service import generate_stats
from chronicle.settings import Settings


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="chronicle",
        description="Derive GitHub profile stats and write them as JSON.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    gen = sub.add_parser(
        "generate", help="Fetch activity and write the stats document"
    )
    gen.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the JSON document (default: OUTPUT_PATH or data.json)",
    )
    gen.add_argument(
        "--username", default=None, help="GitHub login (default: GITHUB_USERNAME)"
    )
    gen.add_argument(
        "--print",
        dest="echo",
        action="store_true",
        help="Also print the document to stdout",
    )
    return ap


def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    try:
        stats = generate_stats(settings, username=args.username)
    except MissingCredentialError as exc:
        logger.error("%s", exc)
        return 1
    except UpstreamQueryError as exc:
        logger.error("GraphQL Error: %s", exc.errors)
        return 1
    except (GitHubAPIError, httpx.HTTPError) as exc:
        logger.error("GitHub API request failed: %s", exc)
        return 1

    document = stats.model_dump_json(indent=2)
    output = args.output or Path(settings.output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document + "\n", encoding="utf-8")
    logger.info("Wrote %s", output)

    if args.echo:
        print(document)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level)
    init_sentry(settings)

    if args.command == "generate":
        return run_generate(args, settings)
    return 2


if __name__ == "__main__":
    sys.exit(main())
