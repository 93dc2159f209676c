"""Agent framework integrations.

Available integrations:
- querytutor.integrations.mcp - MCP (Model Context Protocol) server
"""
