"""
Command line entry point: crawl a path and list every matching file.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from directory_crawler.config import ConfigManager, SystemConfig
from directory_crawler.crawlers import CrawlResult, DirectoryCrawler, FileStream
from directory_crawler.utils.logging import get_logger, setup_logging
from directory_crawler.utils.errors import (
    ConfigurationError,
    DirectoryCrawlerError,
    ValidationError,
    handle_error
)


logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CRAWL_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="directory-crawler",
        description="Recursively list files (including ZIP entries) matching a glob filter."
    )
    parser.add_argument("path", help="Directory or file to crawl")
    parser.add_argument("--parallel", type=int, help="Number of files processed in parallel (default 5)")
    parser.add_argument("--filter", dest="filter_pattern", help="Glob filter for emitted files (default '*')")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level"
    )
    parser.add_argument("--log-file", help="Write logs to this file, rotated daily")
    parser.add_argument("--json-logs", action="store_true", help="Render console logs as JSON")
    return parser


def load_settings(args: argparse.Namespace) -> SystemConfig:
    """Merge the configuration file, environment and command line options."""
    config = ConfigManager(args.config).load_config()

    overrides = {}
    if args.parallel is not None:
        overrides["parallelism"] = args.parallel
    if args.filter_pattern is not None:
        overrides["filter_pattern"] = args.filter_pattern
    if overrides:
        config.crawler = config.crawler.replace(**overrides)

    if args.log_level:
        config.logging.log_level = args.log_level
    if args.log_file:
        config.logging.log_file = args.log_file
    if args.json_logs:
        config.logging.json_output = True

    return config


async def run_crawl(crawler: DirectoryCrawler, path: str, out=None) -> CrawlResult:
    """Crawl ``path``, printing ``<path>\\t<bytes>`` for every emitted file."""
    out = out or sys.stdout

    async def print_file(stream: FileStream) -> None:
        size = await stream.drain()
        print(f"{stream.display_path}\t{size}", file=out)

    crawler.subscribe(print_file)
    try:
        return await crawler.crawl(path)
    finally:
        crawler.unsubscribe(print_file)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_settings(args)
        crawler = DirectoryCrawler(config.crawler)
    except (ConfigurationError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        for detail in e.details.get("errors", []):
            print(f"  - {detail}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(
        log_level=config.logging.log_level,
        log_file=config.logging.log_file,
        json_output=config.logging.json_output,
        retention_days=config.logging.retention_days
    )

    try:
        result = asyncio.run(run_crawl(crawler, args.path))
    except DirectoryCrawlerError as e:
        handle_error(e, logger, {"root": args.path}, reraise=False)
        return EXIT_CRAWL_ERROR
    except KeyboardInterrupt:
        logger.warning("Crawl interrupted")
        return EXIT_CRAWL_ERROR

    print(
        f"{result.files_emitted} file(s) emitted, {result.files_skipped} skipped, "
        f"{result.directories_visited} directories, {result.archives_expanded} archive(s) "
        f"in {result.duration_seconds:.2f}s",
        file=sys.stderr
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
