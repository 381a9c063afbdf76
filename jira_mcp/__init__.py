"""jira-mcp: Jira Cloud REST API exposed as Model Context Protocol tools."""

__version__ = "2.0.0"
