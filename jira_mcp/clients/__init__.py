"""API clients for Jira."""

from .jira_client import JiraClient

__all__ = ["JiraClient"]
