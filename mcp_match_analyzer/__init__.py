"""
MCP adapter for match-analyzer.

Exposes the match_analyzer.check tool for MCP hosts.
"""

from mcp_match_analyzer.tool import handle

__all__ = ["handle"]
__version__ = "0.1.0"
