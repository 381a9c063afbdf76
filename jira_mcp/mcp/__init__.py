"""MCP (Model Context Protocol) server for Jira Cloud.

Exposes Jira issues, worklogs, agile boards, filters and dashboards as MCP
tools over stdio.
"""

from .server import main

__all__ = ["main"]
