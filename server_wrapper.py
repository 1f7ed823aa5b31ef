#!/usr/bin/env python3
"""
Lanzador del servidor MCP de AutoWP en modo stdio
Permite arrancarlo sin instalar el paquete (python server_wrapper.py)
"""

from autowp.server import cli

if __name__ == "__main__":
    cli()
