"""membank: versioned per-project text files for agents, served over MCP."""

__version__ = "0.1.0"
