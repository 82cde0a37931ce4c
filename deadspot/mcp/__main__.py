"""CLI entry point: python -m deadspot.mcp [player_id]"""

from __future__ import annotations

import sys

from loguru import logger


def main() -> None:
    player_id = sys.argv[1] if len(sys.argv) > 1 else "default"

    # stdout carries the MCP protocol; keep logs on stderr
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    from deadspot.config import get_data_dir
    from deadspot.mcp.server import create_server
    from deadspot.session import SessionManager

    manager = SessionManager(root=get_data_dir())
    server = create_server(manager.get(player_id))
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
