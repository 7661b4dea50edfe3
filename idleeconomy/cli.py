from __future__ import annotations

import argparse
import sys

from idleeconomy.catalog import CatalogCache, JsonDirectoryCatalogSource
from idleeconomy.config import EconomyConfig
from idleeconomy.formatting import format_catalog
from idleeconomy.logger import init_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idleeconomy",
        description="IdleEconomy: upgrade economy tools",
    )
    sub = parser.add_subparsers(dest="command")

    cat = sub.add_parser("catalog", help="Validate and print an upgrade catalog")
    cat.add_argument("catalog_dir", help="Directory of upgrade *.json files")
    cat.add_argument(
        "--levels", type=int, default=5, help="Levels to tabulate per upgrade (default: 5)"
    )
    cat.add_argument("--settings", default=None, help="JSON settings file")

    serve = sub.add_parser("serve", help="Run the MCP server on stdio")
    serve.add_argument("catalog_dir", help="Directory of upgrade *.json files")
    serve.add_argument("--settings", default=None, help="JSON settings file")

    return parser


def cmd_catalog(args: argparse.Namespace) -> int:
    config = EconomyConfig.from_settings(args.settings)
    init_logging(config.log_level)
    catalog = CatalogCache(JsonDirectoryCatalogSource(args.catalog_dir, config), config).get()

    errors = catalog.validate()
    if errors:
        print("Catalog errors:")
        for e in errors:
            print(f"  - {e}")
        return 1

    print(format_catalog(catalog, levels=args.levels))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from idleeconomy.mcp.__main__ import serve

    serve(args.catalog_dir, args.settings)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "catalog":
        sys.exit(cmd_catalog(args))
    elif args.command == "serve":
        sys.exit(cmd_serve(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
