"""
Test suite for the browser session MCP server.

Run with: pytest tests/ -v
"""
