# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
Thin Gitee API v5 client used by the assign bot.

Every call raises on failure: ForbiddenError for HTTP 403 (Gitee's answer
when someone can not be assigned), GiteeAPIError for any other error
status, and requests.RequestException for transport problems.
"""

from __future__ import annotations

import logging
import os
import sys

import requests

logger = logging.getLogger(__name__)

API_BASE_URL = os.environ.get("GITEE_API_URL", "https://gitee.com/api/v5")
REQUEST_TIMEOUT = 30
PER_PAGE = 100

# Gitee clears an issue assignee when it is set to a single space.
NO_ASSIGNEE = " "


class GiteeAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"Gitee API error: {status_code} - {message}")
        self.status_code = status_code
        self.message = message


class ForbiddenError(GiteeAPIError):
    pass


# ==============================================================================
# Transport
# ==============================================================================


def get_gitee_token() -> str:
    """Get the Gitee token from environment."""
    token = os.environ.get("GITEE_TOKEN")
    if not token:
        print("ERROR: GITEE_TOKEN not set", file=sys.stderr)
        sys.exit(1)
    return token


def gitee_api(method: str, endpoint: str, data: dict | None = None,
              params: dict | None = None) -> dict | list:
    """Make a Gitee API request and return the decoded JSON body."""
    url = f"{API_BASE_URL}/{endpoint}"
    params = dict(params or {})
    params["access_token"] = get_gitee_token()

    response = requests.request(
        method, url, params=params, json=data, timeout=REQUEST_TIMEOUT,
        headers={"Accept": "application/json"},
    )

    if response.status_code == 403:
        raise ForbiddenError(response.status_code, response.text)
    if response.status_code >= 400:
        raise GiteeAPIError(response.status_code, response.text)

    if response.content:
        return response.json()
    return {}


# ==============================================================================
# Repository
# ==============================================================================


def list_repository_members(org: str, repo: str) -> set[str]:
    """Get the logins of everyone who is a member of the repository."""
    result = gitee_api("GET", f"repos/{org}/{repo}")
    return set(result.get("members") or [])


def list_collaborators(org: str, repo: str) -> set[str]:
    """Get the logins of the repository collaborators, following pagination."""
    logins = set()
    page = 1
    while True:
        result = gitee_api("GET", f"repos/{org}/{repo}/collaborators",
                           params={"page": page, "per_page": PER_PAGE})
        logins.update(item["login"] for item in result)
        if len(result) < PER_PAGE:
            return logins
        page += 1


# ==============================================================================
# Issues
# ==============================================================================


def assign_issue(org: str, repo: str, number: str, login: str) -> None:
    """Set the assignee of an issue. Raises ForbiddenError if Gitee refuses."""
    logger.info("adding assignee from %s/%s#%s: %s", org, repo, number, login)
    gitee_api("PATCH", f"repos/{org}/issues/{number}", {"repo": repo, "assignee": login})


def unassign_issue(org: str, repo: str, number: str) -> None:
    """Clear the assignee of an issue."""
    logger.info("removing assignee from %s/%s#%s", org, repo, number)
    gitee_api("PATCH", f"repos/{org}/issues/{number}", {"repo": repo, "assignee": NO_ASSIGNEE})


def update_issue_collaborators(org: str, repo: str, number: str, collaborators: str) -> None:
    """
    Replace the collaborators of an issue.

    `collaborators` is the already encoded value: a comma-joined login
    list, or "0" to clear them.
    """
    logger.info("updating collaborators of %s/%s#%s: %s", org, repo, number, collaborators)
    gitee_api("PATCH", f"repos/{org}/issues/{number}",
              {"repo": repo, "collaborators": collaborators})


def post_issue_comment(org: str, repo: str, number: str, body: str) -> None:
    gitee_api("POST", f"repos/{org}/{repo}/issues/{number}/comments", {"body": body})


# ==============================================================================
# Pull Requests
# ==============================================================================


def assign_pr_reviewers(org: str, repo: str, number: int, logins: list[str]) -> None:
    logger.info("adding assignee(s) from %s/%s#%d: %s", org, repo, number, logins)
    gitee_api("POST", f"repos/{org}/{repo}/pulls/{number}/assignees",
              {"assignees": ",".join(logins)})


def unassign_pr_reviewers(org: str, repo: str, number: int, logins: list[str]) -> None:
    logger.info("removing assignee(s) from %s/%s#%d: %s", org, repo, number, logins)
    gitee_api("DELETE", f"repos/{org}/{repo}/pulls/{number}/assignees",
              params={"assignees": ",".join(logins)})


def post_pr_comment(org: str, repo: str, number: int, body: str) -> None:
    gitee_api("POST", f"repos/{org}/{repo}/pulls/{number}/comments", {"body": body})
