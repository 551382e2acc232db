"""CLI entry point for SourcePkg.

Subcommands mirror the original android-pkg-installer tool:

  search <query> [filter=<glob>] [fuzziness=<float>]
  list [filter=<glob>]
  tags <package>
  install <package|index> [root=<path>] [tag=<name>]   (alias: download)
  help

Trailing key=value options are parsed after argparse has split the command
line. All orchestration lives in installer/pipeline.py.
"""
from __future__ import annotations

import argparse
import sys
from typing import Dict, Iterable, List, Optional, Sequence

from pkgindex.core.config import CONFIG_ENV_VAR, get_config, get_install_config
from pkgindex.core.logs import TaggedLogger, configure_logging, get_tagged_logger
from pkgindex.core.network import reset_session
from pkgindex.errors import SourcePkgError
from pkgindex.index_client import INDEX_TAG, TAGS_TAG
from pkgindex.model import Package, TagListing
from pkgindex.resolver import parse_identifier

from installer import pipeline

PROG = "sourcepkg"


def create_cli_parser() -> argparse.ArgumentParser:
    """Create argument parser with one subparser per command.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="SourcePkg - search and install source archives from a Gitiles index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search package names, only under platform/
  sourcepkg search build filter=platform/*

  # Show the branches and tags of a package
  sourcepkg tags platform/build

  # Install a tag into ./sources/platform/build
  sourcepkg install platform/build tag=android-14.0.0_r1 root=./sources

  # Legacy: install by listing index
  sourcepkg install 42 tag=master
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to JSON config file (default: ${CONFIG_ENV_VAR} or config.json).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Index host to use instead of index.base_url from config.",
    )

    sub = parser.add_subparsers(dest="command", metavar="command")

    search = sub.add_parser("search", help="Rank packages by how well their name matches a query.")
    search.add_argument("query", help="Text scored against package names.")
    search.add_argument("options", nargs="*", metavar="key=value", help="filter=<glob> fuzziness=<float>")

    listing = sub.add_parser("list", help="List packages in index order.")
    listing.add_argument("options", nargs="*", metavar="key=value", help="filter=<glob>")

    tags = sub.add_parser("tags", help="Show branches and tags of a package.")
    tags.add_argument("package", help="Package name, e.g. platform/build")

    install = sub.add_parser(
        "install",
        aliases=["download"],
        help="Download and extract a package archive.",
    )
    install.add_argument("package", help="Package name or listing index.")
    install.add_argument("options", nargs="*", metavar="key=value", help="root=<path> tag=<name>")

    sub.add_parser("help", help="Show this help.")

    return parser


def parse_options(
    pairs: Iterable[str],
    allowed: Sequence[str],
    parser: argparse.ArgumentParser,
) -> Dict[str, str]:
    """Parse trailing key=value options, exiting with usage on bad input."""
    options: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            parser.error(f"expected key=value, got '{pair}'")
        if key not in allowed:
            parser.error(f"unknown option '{key}' (expected one of: {', '.join(allowed)})")
        options[key] = value
    return options


def display_packages(packages: List[Package], log: TaggedLogger, show_score: bool = False) -> None:
    if not packages:
        log.error(INDEX_TAG, "no content received")
        return

    log.debug(INDEX_TAG, f"repository packages({len(packages)})")
    for pkg in packages:
        line = f"{pkg.name} - #{pkg.index}"
        if show_score:
            line += f" ({pkg.score:.3f})"
        print(line)


def display_tags(package_name: str, listing: TagListing, log: TaggedLogger) -> None:
    if not listing:
        log.error(TAGS_TAG, f"no tags found for {package_name}")
        return

    for group, names in listing.items():
        print(f"{group}:")
        for name in names:
            print(f"  {name}")


def dispatch(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    components: pipeline.Components,
    log: TaggedLogger,
) -> int:
    """Dispatch a parsed command. Raises SourcePkgError on failure."""
    if args.command == "search":
        opts = parse_options(args.options, ("filter", "fuzziness"), parser)
        fuzziness = None
        if "fuzziness" in opts:
            try:
                fuzziness = float(opts["fuzziness"])
            except ValueError:
                parser.error(f"fuzziness must be a number, got '{opts['fuzziness']}'")
            if not 0.0 <= fuzziness <= 1.0:
                parser.error(f"fuzziness must be between 0 and 1, got '{opts['fuzziness']}'")
        results = components.search.search(args.query, pattern=opts.get("filter"), fuzziness=fuzziness)
        display_packages(results, log, show_score=True)
        return 0

    if args.command == "list":
        opts = parse_options(args.options, ("filter",), parser)
        display_packages(components.search.list(opts.get("filter")), log)
        return 0

    if args.command == "tags":
        display_tags(args.package, components.client.list_tags(args.package), log)
        return 0

    if args.command in ("install", "download"):
        opts = parse_options(args.options, ("root", "tag"), parser)
        defaults = get_install_config()
        result = pipeline.install(
            parse_identifier(args.package),
            components.resolver,
            components.fetcher,
            tag_name=opts.get("tag") or defaults["default_tag"],
            root=opts.get("root") or defaults["default_root"],
            log=log,
        )
        print(result.output_dir)
        return 0

    parser.print_help()
    return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Process exit status: 0 on success, 2 on usage errors, the error's
        exit_code for SourcePkgError failures
    """
    parser = create_cli_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 2
    if args.command == "help":
        parser.print_help()
        return 0

    configure_logging(args.log_level)
    log = get_tagged_logger(PROG)

    get_config(force_reload=True, path=args.config)
    reset_session()

    try:
        components = pipeline.build_components(base_url=args.base_url, log=log)
        return dispatch(args, parser, components, log)
    except SourcePkgError as e:
        log.error(pipeline.INSTALL_TAG, str(e), e.__cause__)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
