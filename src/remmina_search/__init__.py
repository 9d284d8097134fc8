"""Remmina Search - find and open saved Remmina connections.

Features:
- Live index of ~/.remmina profiles, kept current by a file watcher
- Multi-term search over session name and protocol
- MCP server so assistants and launchers can act as the search host

Usage:
    remmina-search            # Run MCP server (default)
    remmina-search list       # List saved connections
    remmina-search search rdp # Search connections
"""

from .cli import main
from .provider import RemminaSearchProvider
from .server import create_server

__all__ = ["RemminaSearchProvider", "create_server", "main"]
