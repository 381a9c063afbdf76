"""Tool definitions for the MCP server."""

from typing import Any

ISSUE_ID_OR_KEY = {"type": "string", "minLength": 1, "description": "Issue key or ID (e.g., 'PROJ-123')"}
START_AT = {"type": "integer", "minimum": 0, "description": "Index of the first result"}
CONFIRM_DELETE = {"type": "boolean", "description": "Must be true to confirm deletion"}
BOARD_ID = {"type": "integer", "minimum": 1, "description": "Board ID"}
SPRINT_ID = {"type": "integer", "minimum": 1, "description": "Sprint ID"}
STRING_LIST = {"type": "array", "items": {"type": "string"}}
ISSUE_KEYS = {"type": "array", "items": {"type": "string", "minLength": 1}, "minItems": 1}
LIST_OPERATIONS = {
    "type": "object",
    "properties": {
        "add": STRING_LIST,
        "remove": STRING_LIST,
        "set": STRING_LIST,
    },
}
ID_OPERATIONS = {
    "type": "object",
    "properties": {
        "add": {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "string"}}}},
        "remove": {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "string"}}}},
    },
}
NO_ARGUMENTS = {"type": "object", "properties": {}}


def max_results(maximum: int | None = None, default: int | None = None) -> dict[str, Any]:
    """Schema for a positive ``maxResults`` argument."""
    schema: dict[str, Any] = {"type": "integer", "minimum": 1, "description": "Maximum results to return"}
    if maximum is not None:
        schema["maximum"] = maximum
    if default is not None:
        schema["default"] = default
        schema["description"] += f" (default {default})"
    return schema


# Tool definitions as JSON schemas for MCP
TOOLS: list[dict[str, Any]] = [
    # =========== Auth Tools ===========
    {
        "name": "_internal_jira_set_auth",
        "description": "Use when the user wants to connect Jira using Basic Auth (email + API token). This tool should only be called when the user explicitly provides credentials.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "baseUrl": {"type": "string", "description": "Jira site URL (e.g., https://yoursite.atlassian.net)"},
                "email": {"type": "string", "format": "email", "description": "Atlassian account email"},
                "apiToken": {"type": "string", "minLength": 1, "description": "Atlassian API token"},
                "persist": {
                    "type": "boolean",
                    "default": False,
                    "description": "Also save the credentials in the OS keyring",
                },
            },
            "required": ["baseUrl", "email", "apiToken"],
        },
    },
    {
        "name": "jira_oauth_get_auth_url",
        "description": "Generate the OAuth 2.0 authorization URL that the user should visit to grant access. Returns the URL and required state parameter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "clientId": {
                    "type": "string",
                    "minLength": 1,
                    "description": "OAuth Client ID from Atlassian Developer Console",
                },
                "redirectUri": {
                    "type": "string",
                    "format": "uri",
                    "description": "Callback URL configured in your OAuth app",
                },
                "scopes": {
                    **STRING_LIST,
                    "default": ["read:jira-work", "read:jira-user", "write:jira-work", "offline_access"],
                    "description": "OAuth scopes to request",
                },
                "state": {
                    "type": "string",
                    "minLength": 1,
                    "description": "State value to echo back (a random one is generated if omitted)",
                },
            },
            "required": ["clientId", "redirectUri"],
        },
    },
    {
        "name": "jira_oauth_exchange_code",
        "description": "Exchange the authorization code for access tokens after the user has completed the OAuth flow.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "clientId": {"type": "string", "minLength": 1},
                "clientSecret": {"type": "string", "minLength": 1},
                "code": {"type": "string", "minLength": 1, "description": "Authorization code from the OAuth callback"},
                "redirectUri": {"type": "string", "format": "uri"},
                "siteUrl": {
                    "type": "string",
                    "format": "uri",
                    "description": "Optional: specific Jira site URL (e.g., https://yoursite.atlassian.net)",
                },
                "persist": {"type": "boolean", "default": False},
            },
            "required": ["clientId", "clientSecret", "code", "redirectUri"],
        },
    },
    {
        "name": "jira_oauth_set_tokens",
        "description": "Set OAuth tokens directly if you already have them (e.g., from a previous session or external OAuth flow).",
        "inputSchema": {
            "type": "object",
            "properties": {
                "clientId": {"type": "string", "minLength": 1},
                "clientSecret": {"type": "string", "minLength": 1},
                "accessToken": {"type": "string", "minLength": 1},
                "refreshToken": {"type": "string"},
                "cloudId": {
                    "type": "string",
                    "description": "Cloud ID of the Jira site. If not provided, will be fetched automatically.",
                },
                "siteUrl": {
                    "type": "string",
                    "format": "uri",
                    "description": "Jira site URL to find the correct cloudId",
                },
                "expiresIn": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Seconds until the access token expires; enables early refresh",
                },
                "persist": {"type": "boolean", "default": False},
            },
            "required": ["clientId", "clientSecret", "accessToken"],
        },
    },
    {
        "name": "jira_oauth_refresh",
        "description": "Manually refresh the OAuth access token using the refresh token.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_oauth_list_sites",
        "description": "List all Jira sites accessible with the current OAuth token.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_clear_auth",
        "description": "Use when the user asks to remove or reset stored Jira credentials.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_auth_status",
        "description": "Check the current authentication status and type.",
        "inputSchema": NO_ARGUMENTS,
    },
    # =========== Issue Tools ===========
    {
        "name": "jira_whoami",
        "description": "Use when the user asks who they are in Jira or wants to verify the Jira account in use.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_get_issue",
        "description": "Get the full details of a Jira issue when the user mentions an issue key like PROJ-123 or asks about a specific ticket.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "fields": {**STRING_LIST, "description": "Fields to return"},
                "expand": {"type": "string", "description": "Expand options"},
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_get_issue_summary",
        "description": "Use when the user wants the summary, description, and acceptance criteria for a specific issue key.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_search_issues",
        "description": "Use when the user asks to find issues matching criteria (JQL), like 'my open bugs' or 'tickets updated this week'.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "jql": {"type": "string", "minLength": 1, "description": "JQL query string"},
                "startAt": START_AT,
                "maxResults": max_results(200),
                "fields": {**STRING_LIST, "description": "Fields to return"},
                "expand": {"type": "string", "description": "Expand options"},
                "nextPageToken": {"type": "string", "description": "Token for the next page of results"},
                "reconcileIssues": {"type": "boolean"},
            },
            "required": ["jql"],
        },
    },
    {
        "name": "jira_search_issues_summary",
        "description": "Use when the user wants the top results for a Jira search and only needs key, summary, and status.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "jql": {"type": "string", "minLength": 1, "description": "JQL query string"},
                "maxResults": max_results(50, 10),
            },
            "required": ["jql"],
        },
    },
    {
        "name": "jira_get_my_open_issues",
        "description": "Use when the user asks for their open tickets or what they should work on next.",
        "inputSchema": {
            "type": "object",
            "properties": {"maxResults": max_results(50, 20)},
        },
    },
    {
        "name": "jira_resolve",
        "description": "Primary routing tool. Use this tool first when the user intent is clear (get issue, search, or my issues) but the exact Jira tool to call is uncertain.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "intent": {"type": "string", "enum": ["get_issue", "search", "my_issues"]},
                "issueKey": {"type": "string", "description": "Issue key, required for get_issue"},
                "jql": {"type": "string", "description": "JQL query, required for search"},
                "maxResults": max_results(50),
            },
            "required": ["intent"],
        },
    },
    {
        "name": "jira_get_issue_comments",
        "description": "Use when the user asks for the discussion or comments on a specific ticket; returns a clean list.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "startAt": START_AT,
                "maxResults": max_results(100),
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_add_comment",
        "description": "Use when the user asks to add a comment to a specific ticket; confirm intent before posting.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "body": {"type": "string", "minLength": 1, "description": "Comment text"},
            },
            "required": ["issueIdOrKey", "body"],
        },
    },
    {
        "name": "jira_get_changelog",
        "description": "Get the history of changes for an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "startAt": START_AT,
                "maxResults": max_results(100, 20),
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_create_issue",
        "description": "Create a new Jira issue. Requires project key, issue type, and summary at minimum.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "minLength": 1, "description": "Project key (e.g., 'PROJ')"},
                "issueType": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Issue type name or ID (e.g., 'Bug', 'Task', 'Story')",
                },
                "summary": {"type": "string", "minLength": 1, "description": "Issue title/summary"},
                "description": {
                    "type": "string",
                    "description": "Issue description (plain text, will be converted to ADF)",
                },
                "assignee": {
                    "type": "string",
                    "description": "Assignee account ID. Use '-1' for automatic assignment.",
                },
                "reporter": {"type": "string", "description": "Reporter account ID"},
                "priority": {"type": "string", "description": "Priority name or ID (e.g., 'High', 'Medium', 'Low')"},
                "labels": {**STRING_LIST, "description": "Array of label strings"},
                "components": {**STRING_LIST, "description": "Array of component names or IDs"},
                "fixVersions": {**STRING_LIST, "description": "Array of fix version names or IDs"},
                "affectsVersions": {**STRING_LIST, "description": "Array of affected version names or IDs"},
                "dueDate": {"type": "string", "description": "Due date in YYYY-MM-DD format"},
                "parentKey": {"type": "string", "description": "Parent issue key for subtasks"},
                "environment": {"type": "string", "description": "Environment description"},
                "originalEstimate": {"type": "string", "description": "Original time estimate (e.g., '2h', '1d')"},
                "remainingEstimate": {"type": "string", "description": "Remaining time estimate (e.g., '2h', '1d')"},
                "customFields": {"type": "object", "description": "Custom field values as key-value pairs"},
            },
            "required": ["projectKey", "issueType", "summary"],
        },
    },
    {
        "name": "jira_update_issue",
        "description": "Update an existing Jira issue. Only provided fields will be modified.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "summary": {"type": "string", "description": "New summary/title"},
                "description": {"type": "string", "description": "New description (plain text)"},
                "assignee": {"type": ["string", "null"], "description": "Assignee account ID. Use null to unassign."},
                "priority": {"type": "string", "description": "Priority name or ID"},
                "dueDate": {"type": ["string", "null"], "description": "Due date (YYYY-MM-DD) or null to clear"},
                "labels": {**LIST_OPERATIONS, "description": "Label operations: add, remove, or set"},
                "components": {**LIST_OPERATIONS, "description": "Component operations: add, remove, or set"},
                "fixVersions": {**LIST_OPERATIONS, "description": "Fix version operations: add, remove, or set"},
                "affectsVersions": {
                    **LIST_OPERATIONS,
                    "description": "Affected version operations: add, remove, or set",
                },
                "customFields": {"type": "object", "description": "Custom field values"},
                "notifyUsers": {"type": "boolean", "default": True, "description": "Send notifications to watchers"},
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_delete_issue",
        "description": "Delete a Jira issue. Requires explicit confirmation. Use with caution - this action cannot be undone.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": {**ISSUE_ID_OR_KEY, "description": "Issue key or ID to delete"},
                "deleteSubtasks": {"type": "boolean", "default": False, "description": "Also delete subtasks"},
                "confirmDelete": CONFIRM_DELETE,
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_assign_issue",
        "description": "Assign or unassign a Jira issue to a user.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "accountId": {
                    "type": ["string", "null"],
                    "description": "User account ID to assign, '-1' for automatic, or null to unassign",
                },
            },
            "required": ["issueIdOrKey", "accountId"],
        },
    },
    {
        "name": "jira_get_transitions",
        "description": "Get available workflow transitions for an issue. Use before transitioning to see valid options.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "expand": {
                    "type": "string",
                    "description": "Expand options: 'transitions.fields' to include required fields",
                },
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_transition_issue",
        "description": "Move a Jira issue to a different status by executing a workflow transition.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "transitionId": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Transition ID (get from jira_get_transitions)",
                },
                "comment": {"type": "string", "description": "Comment to add during transition"},
                "resolution": {
                    "type": "string",
                    "description": "Resolution name for closing transitions (e.g., 'Done', 'Fixed')",
                },
                "fields": {"type": "object", "description": "Additional fields required by the transition"},
            },
            "required": ["issueIdOrKey", "transitionId"],
        },
    },
    {
        "name": "jira_get_all_labels",
        "description": "Get all labels used across all issues in the Jira instance.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "startAt": {**START_AT, "default": 0},
                "maxResults": max_results(default=1000),
            },
        },
    },
    {
        "name": "jira_add_labels",
        "description": "Add, set, or remove labels on an issue. Use 'add' to append, 'set' to replace all, or 'remove' to delete specific labels.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "labels": {**STRING_LIST, "minItems": 1, "description": "Labels to add/set/remove"},
                "operation": {
                    "type": "string",
                    "enum": ["add", "set", "remove"],
                    "default": "add",
                    "description": "Operation: 'add' appends, 'set' replaces all, 'remove' deletes specified labels",
                },
            },
            "required": ["issueIdOrKey", "labels"],
        },
    },
    # =========== Worklog Tools ===========
    {
        "name": "jira_add_worklog",
        "description": "Use when the user wants to log time/work on a specific Jira ticket. Allows specifying time spent, start date/time, and an optional description.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": {**ISSUE_ID_OR_KEY, "description": "The issue key (e.g., PROJ-123) to log work against"},
                "timeSpent": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Time spent in Jira format (e.g., '1h', '30m', '1h 30m', '1d')",
                },
                "started": {
                    "type": "string",
                    "description": "When the work started in ISO 8601 format (e.g., '2026-02-13T14:00:00.000+0000'). Defaults to now if not provided.",
                },
                "comment": {"type": "string", "description": "Optional description of the work performed"},
            },
            "required": ["issueIdOrKey", "timeSpent"],
        },
    },
    {
        "name": "jira_get_worklogs",
        "description": "Use when the user wants to see work logs recorded on a specific Jira ticket.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": {**ISSUE_ID_OR_KEY, "description": "The issue key (e.g., PROJ-123) to get work logs for"},
                "startAt": START_AT,
                "maxResults": max_results(100),
            },
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_get_updated_worklog_ids",
        "description": "Get IDs of worklogs that were created or updated since a specific date/time. Use this to discover worklogs for reporting purposes.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "since": {
                    "type": "string",
                    "description": "Get worklogs updated since this date. Can be ISO 8601 format (e.g., '2026-01-15T00:00:00.000Z') or Unix timestamp in milliseconds.",
                },
                "expand": {"type": "string", "description": "Expand options for additional worklog properties"},
            },
            "required": ["since"],
        },
    },
    {
        "name": "jira_get_worklogs_by_ids",
        "description": "Get full worklog details for a list of worklog IDs. Use after getting IDs from jira_get_updated_worklog_ids.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "ids": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 1},
                    "minItems": 1,
                    "maxItems": 1000,
                    "description": "Array of worklog IDs to fetch (max 1000)",
                },
                "expand": {"type": "string", "description": "Expand options"},
            },
            "required": ["ids"],
        },
    },
    {
        "name": "jira_get_deleted_worklog_ids",
        "description": "Get IDs of worklogs that were deleted since a specific date/time. Useful for audit and sync purposes.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "since": {
                    "type": "string",
                    "description": "Get worklogs deleted since this date. ISO 8601 format or Unix timestamp in milliseconds.",
                },
            },
            "required": ["since"],
        },
    },
    {
        "name": "jira_get_user_worklogs",
        "description": "Get all worklogs for a specific user within a date range. Combines worklog discovery and filtering to provide a complete time tracking report for a person.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "accountId": {
                    "type": "string",
                    "description": "User account ID to filter worklogs for. If not provided, returns worklogs for the current user.",
                },
                "since": {
                    "type": "string",
                    "description": "Start date for the report. ISO 8601 format (e.g., '2026-01-15') or relative like '30 days ago' will be parsed.",
                },
                "until": {"type": "string", "description": "End date for the report. Defaults to now if not provided."},
                "includeIssueDetails": {
                    "type": "boolean",
                    "default": False,
                    "description": "Whether to fetch issue details (key, summary) for each worklog",
                },
            },
            "required": ["since"],
        },
    },
    # =========== Project and Metadata Tools ===========
    {
        "name": "jira_list_projects",
        "description": "Use when the user asks which Jira projects they can access or wants a list of projects.",
        "inputSchema": {
            "type": "object",
            "properties": {"startAt": START_AT, "maxResults": max_results(50)},
        },
    },
    {
        "name": "jira_get_project",
        "description": "Use when the user mentions a project key and asks for project details or metadata.",
        "inputSchema": {
            "type": "object",
            "properties": {"projectIdOrKey": {"type": "string", "minLength": 1, "description": "Project key or ID"}},
            "required": ["projectIdOrKey"],
        },
    },
    {
        "name": "jira_get_issue_types",
        "description": "Get available issue types, optionally filtered by project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "description": "Filter issue types for a specific project"},
            },
        },
    },
    {
        "name": "jira_get_priorities",
        "description": "Get available priority levels for issues.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_get_statuses",
        "description": "Get available statuses, optionally filtered by project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "description": "Filter statuses for a specific project"},
            },
        },
    },
    {
        "name": "jira_get_components",
        "description": "Get components for a specific project.",
        "inputSchema": {
            "type": "object",
            "properties": {"projectKey": {"type": "string", "minLength": 1, "description": "Project key"}},
            "required": ["projectKey"],
        },
    },
    {
        "name": "jira_get_versions",
        "description": "Get versions for a specific project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "minLength": 1, "description": "Project key"},
                "released": {"type": "boolean", "description": "Filter by released status"},
            },
            "required": ["projectKey"],
        },
    },
    {
        "name": "jira_search_users",
        "description": "Search for Jira users by name, email, or username.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "minLength": 1, "description": "Search query (name, email, or username)"},
                "projectKey": {"type": "string", "description": "Filter users with access to this project"},
                "maxResults": max_results(50, 10),
            },
            "required": ["query"],
        },
    },
    {
        "name": "jira_get_fields",
        "description": "Get all available fields including custom fields.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_get_create_metadata",
        "description": "Get metadata for creating issues in a project, including required fields.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKeys": {**STRING_LIST, "description": "Project keys to get metadata for"},
                "projectIds": {**STRING_LIST, "description": "Project IDs to get metadata for"},
                "issuetypeNames": {**STRING_LIST, "description": "Issue type names to filter"},
                "expand": {"type": "string", "description": "Expand options"},
            },
        },
    },
    {
        "name": "jira_get_edit_metadata",
        "description": "Get metadata for editing a specific issue, including editable fields.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_autocomplete_jql",
        "description": "Get autocomplete suggestions for JQL field values. Useful for building JQL queries interactively.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "fieldName": {
                    "type": "string",
                    "description": "Field name to get value suggestions for (e.g., status, priority, assignee)",
                },
                "fieldValue": {"type": "string", "description": "Partial value to autocomplete"},
                "predicateName": {"type": "string", "description": "Predicate name for function suggestions"},
                "predicateValue": {"type": "string", "description": "Partial predicate value to autocomplete"},
            },
        },
    },
    {
        "name": "jira_validate_jql",
        "description": "Validate one or more JQL queries for syntax and semantic correctness.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "queries": {**STRING_LIST, "minItems": 1, "description": "JQL queries to validate"},
                "validation": {
                    "type": "string",
                    "enum": ["strict", "warn", "none"],
                    "default": "strict",
                    "description": "Validation level: strict (errors only), warn (errors and warnings), none (no validation)",
                },
            },
            "required": ["queries"],
        },
    },
    {
        "name": "jira_parse_jql",
        "description": "Parse JQL queries and return their abstract syntax tree (AST) structure. Useful for understanding query structure.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "queries": {**STRING_LIST, "minItems": 1, "description": "JQL queries to parse"},
                "validation": {
                    "type": "string",
                    "enum": ["strict", "warn", "none"],
                    "default": "none",
                    "description": "Validation level",
                },
            },
            "required": ["queries"],
        },
    },
    # =========== Agile Tools ===========
    {
        "name": "jira_get_boards",
        "description": "Get all Scrum and Kanban boards, optionally filtered by project or type.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectKeyOrId": {"type": "string", "description": "Filter boards by project"},
                "type": {
                    "type": "string",
                    "enum": ["scrum", "kanban", "simple"],
                    "description": "Filter by board type",
                },
                "name": {"type": "string", "description": "Filter boards by name (contains)"},
                "startAt": START_AT,
                "maxResults": max_results(50, 50),
            },
        },
    },
    {
        "name": "jira_get_board",
        "description": "Get details of a specific board including configuration.",
        "inputSchema": {
            "type": "object",
            "properties": {"boardId": BOARD_ID},
            "required": ["boardId"],
        },
    },
    {
        "name": "jira_get_board_configuration",
        "description": "Get the configuration of a board including columns, estimation, and ranking.",
        "inputSchema": {
            "type": "object",
            "properties": {"boardId": BOARD_ID},
            "required": ["boardId"],
        },
    },
    {
        "name": "jira_get_sprints",
        "description": "Get sprints for a board, optionally filtered by state.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "boardId": BOARD_ID,
                "state": {
                    "type": "string",
                    "enum": ["future", "active", "closed"],
                    "description": "Filter by sprint state",
                },
                "startAt": START_AT,
                "maxResults": max_results(50, 50),
            },
            "required": ["boardId"],
        },
    },
    {
        "name": "jira_get_sprint",
        "description": "Get details of a specific sprint.",
        "inputSchema": {
            "type": "object",
            "properties": {"sprintId": SPRINT_ID},
            "required": ["sprintId"],
        },
    },
    {
        "name": "jira_create_sprint",
        "description": "Create a new sprint on a board.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "boardId": BOARD_ID,
                "name": {"type": "string", "minLength": 1, "description": "Sprint name"},
                "startDate": {"type": "string", "description": "Start date (ISO 8601)"},
                "endDate": {"type": "string", "description": "End date (ISO 8601)"},
                "goal": {"type": "string", "description": "Sprint goal"},
            },
            "required": ["boardId", "name"],
        },
    },
    {
        "name": "jira_update_sprint",
        "description": "Update sprint details including name, dates, and goal.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": SPRINT_ID,
                "name": {"type": "string", "description": "New sprint name"},
                "state": {"type": "string", "enum": ["future", "active", "closed"], "description": "Sprint state"},
                "startDate": {"type": "string", "description": "Start date (ISO 8601)"},
                "endDate": {"type": "string", "description": "End date (ISO 8601)"},
                "goal": {"type": "string", "description": "Sprint goal"},
            },
            "required": ["sprintId"],
        },
    },
    {
        "name": "jira_start_sprint",
        "description": "Start a sprint that is in 'future' state.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": SPRINT_ID,
                "startDate": {"type": "string", "description": "Start date (defaults to now)"},
                "endDate": {"type": "string", "description": "End date (required for starting a sprint)"},
            },
            "required": ["sprintId", "endDate"],
        },
    },
    {
        "name": "jira_complete_sprint",
        "description": "Complete an active sprint. Optionally move incomplete issues to another sprint or backlog.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": {**SPRINT_ID, "description": "Sprint ID to complete"},
                "moveIncompleteIssuesTo": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Sprint ID to move incomplete issues to (omit to move to backlog)",
                },
            },
            "required": ["sprintId"],
        },
    },
    {
        "name": "jira_delete_sprint",
        "description": "Delete a sprint. Use with caution - cannot be undone.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": {**SPRINT_ID, "description": "Sprint ID to delete"},
                "confirmDelete": CONFIRM_DELETE,
            },
            "required": ["sprintId"],
        },
    },
    {
        "name": "jira_get_sprint_issues",
        "description": "Get all issues in a sprint.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": SPRINT_ID,
                "jql": {"type": "string", "description": "Additional JQL filter"},
                "fields": {**STRING_LIST, "description": "Fields to return"},
                "startAt": START_AT,
                "maxResults": max_results(100, 50),
            },
            "required": ["sprintId"],
        },
    },
    {
        "name": "jira_move_issues_to_sprint",
        "description": "Move issues to a sprint.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sprintId": {**SPRINT_ID, "description": "Target sprint ID"},
                "issueKeys": {**ISSUE_KEYS, "description": "Issue keys to move"},
            },
            "required": ["sprintId", "issueKeys"],
        },
    },
    {
        "name": "jira_get_backlog_issues",
        "description": "Get issues in the backlog (not in any active sprint) for a board.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "boardId": BOARD_ID,
                "jql": {"type": "string", "description": "Additional JQL filter"},
                "fields": {**STRING_LIST, "description": "Fields to return"},
                "startAt": START_AT,
                "maxResults": max_results(100, 50),
            },
            "required": ["boardId"],
        },
    },
    {
        "name": "jira_move_issues_to_backlog",
        "description": "Move issues from a sprint back to the backlog.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueKeys": {**ISSUE_KEYS, "description": "Issue keys to move to backlog"}},
            "required": ["issueKeys"],
        },
    },
    {
        "name": "jira_rank_issues",
        "description": "Change the rank of issues on a board by placing them before or after another issue.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueKeys": {**ISSUE_KEYS, "description": "Issue keys to rank"},
                "rankBeforeIssue": {"type": "string", "description": "Issue key to rank before"},
                "rankAfterIssue": {"type": "string", "description": "Issue key to rank after"},
            },
            "required": ["issueKeys"],
        },
    },
    {
        "name": "jira_get_epics",
        "description": "Get epics for a board.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "boardId": BOARD_ID,
                "done": {"type": "string", "enum": ["true", "false"], "description": "Filter by completion status"},
                "startAt": START_AT,
                "maxResults": max_results(50, 50),
            },
            "required": ["boardId"],
        },
    },
    {
        "name": "jira_get_epic_issues",
        "description": "Get all issues belonging to an epic.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "epicIdOrKey": {"type": "string", "minLength": 1, "description": "Epic ID or key"},
                "jql": {"type": "string", "description": "Additional JQL filter"},
                "fields": {**STRING_LIST, "description": "Fields to return"},
                "startAt": START_AT,
                "maxResults": max_results(100, 50),
            },
            "required": ["epicIdOrKey"],
        },
    },
    {
        "name": "jira_move_issues_to_epic",
        "description": "Move issues to an epic.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "epicIdOrKey": {"type": "string", "minLength": 1, "description": "Epic ID or key"},
                "issueKeys": {**ISSUE_KEYS, "description": "Issue keys to move"},
            },
            "required": ["epicIdOrKey", "issueKeys"],
        },
    },
    {
        "name": "jira_remove_issues_from_epic",
        "description": "Remove issues from their epic (move to no epic).",
        "inputSchema": {
            "type": "object",
            "properties": {"issueKeys": {**ISSUE_KEYS, "description": "Issue keys to remove from epic"}},
            "required": ["issueKeys"],
        },
    },
    # =========== Collaboration Tools ===========
    {
        "name": "jira_get_issue_links",
        "description": "Get all linked issues for a specific issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_create_issue_link",
        "description": "Create a link between two issues.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "inwardIssue": {"type": "string", "minLength": 1, "description": "Inward issue key (the 'from' issue)"},
                "outwardIssue": {"type": "string", "minLength": 1, "description": "Outward issue key (the 'to' issue)"},
                "linkType": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Link type name (e.g., 'Blocks', 'Relates', 'Duplicates')",
                },
                "comment": {"type": "string", "description": "Comment to add with the link"},
            },
            "required": ["inwardIssue", "outwardIssue", "linkType"],
        },
    },
    {
        "name": "jira_delete_issue_link",
        "description": "Remove a link between issues.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "linkId": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Link ID to delete (get from jira_get_issue_links)",
                },
            },
            "required": ["linkId"],
        },
    },
    {
        "name": "jira_get_link_types",
        "description": "Get available link types for linking issues.",
        "inputSchema": NO_ARGUMENTS,
    },
    {
        "name": "jira_get_watchers",
        "description": "Get the list of users watching an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_add_watcher",
        "description": "Add a user to watch an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "accountId": {"type": "string", "minLength": 1, "description": "User account ID to add as watcher"},
            },
            "required": ["issueIdOrKey", "accountId"],
        },
    },
    {
        "name": "jira_remove_watcher",
        "description": "Remove a user from watching an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "accountId": {"type": "string", "minLength": 1, "description": "User account ID to remove"},
            },
            "required": ["issueIdOrKey", "accountId"],
        },
    },
    {
        "name": "jira_get_votes",
        "description": "Get the vote count and voters for an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_add_vote",
        "description": "Add your vote to an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_remove_vote",
        "description": "Remove your vote from an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_get_attachments",
        "description": "Get all attachments for an issue.",
        "inputSchema": {
            "type": "object",
            "properties": {"issueIdOrKey": ISSUE_ID_OR_KEY},
            "required": ["issueIdOrKey"],
        },
    },
    {
        "name": "jira_delete_attachment",
        "description": "Delete an attachment from an issue. Requires explicit confirmation.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "attachmentId": {"type": "string", "minLength": 1, "description": "Attachment ID to delete"},
                "confirmDelete": CONFIRM_DELETE,
            },
            "required": ["attachmentId"],
        },
    },
    {
        "name": "jira_upload_attachment",
        "description": "Upload a file attachment to an issue. Requires the file path on the local filesystem.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdOrKey": ISSUE_ID_OR_KEY,
                "filePath": {"type": "string", "minLength": 1, "description": "Absolute path to the file to upload"},
                "filename": {
                    "type": "string",
                    "description": "Override the filename (defaults to original filename)",
                },
            },
            "required": ["issueIdOrKey", "filePath"],
        },
    },
    {
        "name": "jira_get_attachment_metadata",
        "description": "Get metadata for a specific attachment by ID.",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "string", "minLength": 1, "description": "Attachment ID"}},
            "required": ["id"],
        },
    },
    {
        "name": "jira_get_attachment_content",
        "description": "Get the content/download URL for an attachment. Returns the redirect URL or content depending on redirect setting.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "minLength": 1, "description": "Attachment ID"},
                "redirect": {
                    "type": "boolean",
                    "default": True,
                    "description": "Whether to return redirect URL (true) or follow redirect (false)",
                },
            },
            "required": ["id"],
        },
    },
    # =========== Filter and Dashboard Tools ===========
    {
        "name": "jira_get_filters",
        "description": "Get saved filters, optionally filtered by name.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filterName": {"type": "string", "description": "Filter by name (contains)"},
                "owner": {"type": "string", "description": "Filter by owner account ID"},
                "expand": {
                    "type": "string",
                    "description": "Expand options: description, owner, jql, viewUrl, searchUrl, favourite, favouritedCount, sharePermissions",
                },
                "startAt": START_AT,
                "maxResults": max_results(50, 50),
            },
        },
    },
    {
        "name": "jira_get_filter",
        "description": "Get details of a specific filter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filterId": {"type": "string", "minLength": 1, "description": "Filter ID"},
                "expand": {"type": "string", "description": "Expand options"},
            },
            "required": ["filterId"],
        },
    },
    {
        "name": "jira_create_filter",
        "description": "Create a new saved filter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1, "description": "Filter name"},
                "jql": {"type": "string", "minLength": 1, "description": "JQL query"},
                "description": {"type": "string", "description": "Filter description"},
                "favourite": {"type": "boolean", "description": "Mark as favourite"},
            },
            "required": ["name", "jql"],
        },
    },
    {
        "name": "jira_update_filter",
        "description": "Update an existing filter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filterId": {"type": "string", "minLength": 1, "description": "Filter ID"},
                "name": {"type": "string", "description": "New filter name"},
                "jql": {"type": "string", "description": "New JQL query"},
                "description": {"type": "string", "description": "New description"},
                "favourite": {"type": "boolean", "description": "Favourite status"},
            },
            "required": ["filterId"],
        },
    },
    {
        "name": "jira_delete_filter",
        "description": "Delete a saved filter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filterId": {"type": "string", "minLength": 1, "description": "Filter ID to delete"},
                "confirmDelete": CONFIRM_DELETE,
            },
            "required": ["filterId"],
        },
    },
    {
        "name": "jira_get_my_filters",
        "description": "Get filters owned by the current user.",
        "inputSchema": {
            "type": "object",
            "properties": {"expand": {"type": "string", "description": "Expand options"}},
        },
    },
    {
        "name": "jira_get_favourite_filters",
        "description": "Get filters marked as favourite by the current user.",
        "inputSchema": {
            "type": "object",
            "properties": {"expand": {"type": "string", "description": "Expand options"}},
        },
    },
    {
        "name": "jira_get_dashboards",
        "description": "Get a list of dashboards. Can filter by favourite or owned dashboards.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filter": {
                    "type": "string",
                    "enum": ["favourite", "my"],
                    "description": "Filter dashboards: 'favourite' for favourited, 'my' for owned",
                },
                "startAt": {**START_AT, "default": 0},
                "maxResults": max_results(default=50),
            },
        },
    },
    {
        "name": "jira_search_dashboards",
        "description": "Search for dashboards by name, owner, or other criteria.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "dashboardName": {
                    "type": "string",
                    "description": "Filter by dashboard name (case insensitive contains)",
                },
                "accountId": {"type": "string", "description": "Filter by owner account ID"},
                "groupname": {"type": "string", "description": "Filter by group permission"},
                "orderBy": {
                    "type": "string",
                    "enum": ["name", "-name", "id", "-id", "owner", "-owner", "favourite_count", "-favourite_count"],
                    "description": "Order results by field (prefix with - for descending)",
                },
                "startAt": {**START_AT, "default": 0},
                "maxResults": max_results(default=50),
                "expand": {
                    "type": "string",
                    "description": "Expand options: description, owner, viewUrl, favourite, favouritedCount, sharePermissions, editPermissions",
                },
            },
        },
    },
    {
        "name": "jira_get_dashboard",
        "description": "Get details of a specific dashboard by ID.",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "string", "minLength": 1, "description": "Dashboard ID"}},
            "required": ["id"],
        },
    },
    {
        "name": "jira_get_dashboard_gadgets",
        "description": "Get all gadgets on a dashboard.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "dashboardId": {"type": "string", "minLength": 1, "description": "Dashboard ID"},
                "moduleKey": {**STRING_LIST, "description": "Filter by gadget module keys"},
                "uri": {"type": "string", "description": "Filter by gadget URI"},
                "gadgetId": {**STRING_LIST, "description": "Filter by gadget IDs"},
            },
            "required": ["dashboardId"],
        },
    },
    {
        "name": "jira_add_dashboard_gadget",
        "description": "Add a gadget to a dashboard. Provide either moduleKey or uri to specify the gadget type.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "dashboardId": {"type": "string", "minLength": 1, "description": "Dashboard ID"},
                "moduleKey": {
                    "type": "string",
                    "description": "Module key of the gadget type (e.g., com.atlassian.jira.gadgets:filter-results-gadget)",
                },
                "uri": {"type": "string", "description": "URI of the gadget type"},
                "color": {
                    "type": "string",
                    "enum": ["blue", "red", "yellow", "green", "cyan", "purple", "gray", "white"],
                    "description": "Gadget colour",
                },
                "position": {
                    "type": "object",
                    "properties": {
                        "row": {"type": "integer", "minimum": 0, "description": "Row position (0-indexed)"},
                        "column": {"type": "integer", "minimum": 0, "description": "Column position (0-indexed)"},
                    },
                    "required": ["row", "column"],
                    "description": "Position on dashboard grid",
                },
                "title": {"type": "string", "description": "Gadget title"},
                "ignoreUriAndModuleKeyValidation": {
                    "type": "boolean",
                    "default": False,
                    "description": "Skip validation of moduleKey/uri",
                },
            },
            "required": ["dashboardId"],
        },
    },
    # =========== Bulk Tools ===========
    {
        "name": "jira_bulk_edit_issues",
        "description": "Edit multiple issues at once. Supports bulk editing of labels, assignee, priority, components, and fix versions. Returns a taskId to track progress.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdsOrKeys": {**STRING_LIST, "minItems": 1, "description": "Array of issue IDs or keys to edit"},
                "editedFieldsInput": {
                    "type": "object",
                    "properties": {
                        "labels": LIST_OPERATIONS,
                        "assignee": {
                            "type": "object",
                            "properties": {"accountId": {"type": "string", "description": "Account ID of the assignee"}},
                            "required": ["accountId"],
                        },
                        "priority": {
                            "type": "object",
                            "properties": {"id": {"type": "string", "description": "Priority ID"}},
                            "required": ["id"],
                        },
                        "components": ID_OPERATIONS,
                        "fixVersions": ID_OPERATIONS,
                    },
                    "description": "Fields to edit with their operations",
                },
                "sendNotifications": {
                    "type": "boolean",
                    "default": True,
                    "description": "Whether to send email notifications",
                },
            },
            "required": ["issueIdsOrKeys", "editedFieldsInput"],
        },
    },
    {
        "name": "jira_bulk_watch_issues",
        "description": "Add watchers to multiple issues at once. Returns a taskId to track progress.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdsOrKeys": {**STRING_LIST, "minItems": 1, "description": "Array of issue IDs or keys to watch"},
                "accountIds": {
                    **STRING_LIST,
                    "description": "Account IDs to add as watchers (defaults to current user)",
                },
            },
            "required": ["issueIdsOrKeys"],
        },
    },
    {
        "name": "jira_bulk_unwatch_issues",
        "description": "Remove watchers from multiple issues at once. Returns a taskId to track progress.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "issueIdsOrKeys": {
                    **STRING_LIST,
                    "minItems": 1,
                    "description": "Array of issue IDs or keys to unwatch",
                },
                "accountIds": {
                    **STRING_LIST,
                    "description": "Account IDs to remove as watchers (defaults to current user)",
                },
            },
            "required": ["issueIdsOrKeys"],
        },
    },
    {
        "name": "jira_get_bulk_operation_progress",
        "description": "Check the progress of an async bulk operation using its taskId.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "taskId": {"type": "string", "minLength": 1, "description": "The task ID returned from a bulk operation"},
            },
            "required": ["taskId"],
        },
    },
]

_TOOLS_BY_NAME = {tool["name"]: tool for tool in TOOLS}


def get_tools() -> list[dict[str, Any]]:
    """Get all tool definitions.

    Returns:
        List of tool definition dicts.
    """
    return TOOLS


def get_tool_schema(name: str) -> dict[str, Any] | None:
    """Get one tool definition by name, or None if there is no such tool."""
    return _TOOLS_BY_NAME.get(name)
