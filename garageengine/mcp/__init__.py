"""MCP adapter exposing the garage runtime as playtesting tools."""
