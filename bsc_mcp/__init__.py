"""
BSC MCP server package.

This package exposes LLM-friendly tools backed by a BSC node's JSON-RPC API,
reachable over stdio and HTTP/SSE. See DESIGN.md for full details.
"""

__all__ = ["config"]
