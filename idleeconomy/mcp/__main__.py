"""CLI entry point: python -m idleeconomy.mcp <catalog_dir> [settings.json]"""

from __future__ import annotations

import sys


def serve(catalog_dir: str, settings: str | None = None) -> None:
    from idleeconomy.catalog import JsonDirectoryCatalogSource
    from idleeconomy.config import EconomyConfig
    from idleeconomy.logger import init_logging
    from idleeconomy.mcp.server import create_server
    from idleeconomy.runtime import EconomyRuntime

    config = EconomyConfig.from_settings(settings)
    init_logging(config.log_level)
    runtime = EconomyRuntime(JsonDirectoryCatalogSource(catalog_dir, config), config=config)
    server = create_server(runtime)
    server.run(transport="stdio")


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m idleeconomy.mcp <catalog_dir> [settings.json]", file=sys.stderr)
        print("Example: python -m idleeconomy.mcp examples/game_data/upgrades", file=sys.stderr)
        sys.exit(1)

    serve(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)


if __name__ == "__main__":
    main()
