"""PMS Analytics MCP server: one analytics view over several hotel PMS vendors."""

__version__ = "0.1.0"
