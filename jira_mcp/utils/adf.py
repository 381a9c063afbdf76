"""Atlassian Document Format (ADF) helpers."""

from typing import Any


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in a single-paragraph ADF document.

    Args:
        text: Plain text.

    Returns:
        ADF document structure.
    """
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def adf_to_text(node: Any) -> str:
    """Extract plain text from an ADF node, list of nodes, or document.

    Paragraph children are joined with newlines, other containers with spaces.

    Args:
        node: ADF structure (dict or list), or None.

    Returns:
        Plain text content.
    """
    if not node:
        return ""

    if isinstance(node, list):
        parts = [adf_to_text(child) for child in node]
        return "\n".join(part for part in parts if part).strip()

    if not isinstance(node, dict):
        return ""

    if isinstance(node.get("text"), str):
        return node["text"]

    content = node.get("content")
    if isinstance(content, list):
        parts = [adf_to_text(child) for child in content]
        separator = "\n" if node.get("type") == "paragraph" else " "
        return separator.join(part for part in parts if part).strip()

    return ""


def normalize_field_text(value: Any) -> str:
    """Render a Jira field value (string, number or ADF) as plain text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        return adf_to_text(value)
    return ""
