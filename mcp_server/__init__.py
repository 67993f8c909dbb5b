"""MCP tool server for the netroute package."""
