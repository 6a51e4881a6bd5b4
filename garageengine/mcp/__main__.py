"""CLI entry point: python -m garageengine.mcp [game_module]"""

from __future__ import annotations

import sys


def main() -> None:
    module_path = sys.argv[1] if len(sys.argv) > 1 else None

    # Redirect stdout to stderr during module loading in case define_garage() prints
    real_stdout = sys.stdout
    sys.stdout = sys.stderr
    try:
        from garageengine.cli import load_game

        definition = load_game(module_path)
    finally:
        sys.stdout = real_stdout

    from garageengine.mcp.server import create_server

    server = create_server(definition)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
