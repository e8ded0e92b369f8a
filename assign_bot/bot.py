#!/usr/bin/env python3
# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors
"""
Assign Bot for Gitee issues and pull requests

The bot reacts to newly created comments on open issues and pull requests
and keeps assignees, reviewers and collaborators in line with the
commands found in the comment. Each command goes on its own line:

  /assign [@login ...]
    - Pull request: add the logins as reviewers (assignees)
    - Issue: set the single assignee
    - Without a login, the commenter assigns themselves

  /unassign [@login ...]
    - Remove reviewers from a pull request, or clear the issue assignee

  /add-collaborator [@login ...]
  /rm-collaborator [@login ...]
    - Add or remove issue collaborators

Requests that can not be honoured (non-members, a second assignee, an
assignee who is also a collaborator, ...) are answered with a single reply
to the triggering comment. Successful commands stay silent.

Environment:
  GITEE_TOKEN           API token (required)
  GITEE_EVENT_PATH      JSON file holding the Note Hook payload (required)
  ASSIGN_BOT_CONFIG     YAML configuration (default: assign_bot.yaml)
  ASSIGN_BOT_NAME       the bot's own login, its comments are ignored
  ASSIGN_BOT_LOG_LEVEL  logging level (default: INFO)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field

import requests

from . import gitee_api
from .common import commands
from .common.commands import CommandFamily
from .common.diagnostics import compose_rejections
from .common.eligibility import Rejection, RejectionKind, rejection
from .common.reconcile import (
    encode_collaborators,
    plan_issue_assignee,
    plan_issue_collaborators,
    plan_pr_reviewers,
)
from .config import ConfigError, RepoConfig, load_config

logger = logging.getLogger(__name__)

BOT_NAME = os.environ.get("ASSIGN_BOT_NAME", "assign-bot")
DEFAULT_CONFIG_PATH = "assign_bot.yaml"


# ==============================================================================
# Events
# ==============================================================================


def _login(user: dict | None) -> str | None:
    if not user:
        return None
    return user.get("login") or None


def _logins(users: list[dict] | None) -> set[str]:
    return {u["login"] for u in users or [] if u.get("login")}


@dataclass
class CommentEvent:
    """A freshly created comment on an open issue or pull request."""

    org: str
    repo: str
    number: str | int
    is_pull_request: bool
    comment: str
    commenter: str
    comment_url: str
    assignee: str | None = None
    assignees: set[str] = field(default_factory=set)
    collaborators: set[str] = field(default_factory=set)

    @classmethod
    def from_payload(cls, payload: dict) -> CommentEvent | None:
        """
        Build an event from a Gitee Note Hook payload.

        Returns None for anything that is not a new comment on an open
        issue or pull request.
        """
        if payload.get("action") != "comment":
            return None

        noteable_type = payload.get("noteable_type")
        if noteable_type == "PullRequest":
            subject = payload.get("pull_request") or {}
        elif noteable_type == "Issue":
            subject = payload.get("issue") or {}
        else:
            return None

        if subject.get("state") != "open":
            return None

        repository = payload.get("repository") or payload.get("project") or {}
        comment = payload.get("comment") or {}

        return cls(
            org=repository.get("namespace", ""),
            repo=repository.get("path", ""),
            number=subject.get("number"),
            is_pull_request=noteable_type == "PullRequest",
            comment=comment.get("body") or "",
            commenter=_login(comment.get("user")) or "",
            comment_url=comment.get("html_url", ""),
            assignee=_login(subject.get("assignee")),
            assignees=_logins(subject.get("assignees")),
            collaborators=_logins(subject.get("collaborators")),
        )


def reply(event: CommentEvent, rejections: list[Rejection]) -> bool:
    """Post the diagnostics for a command, if there are any."""
    body = compose_rejections(event.commenter, event.comment_url, rejections)
    if body is None:
        return False

    if event.is_pull_request:
        gitee_api.post_pr_comment(event.org, event.repo, event.number, body)
    else:
        gitee_api.post_issue_comment(event.org, event.repo, event.number, body)
    return True


def raise_errors(errors: list[Exception], message: str) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(message, errors)


# ==============================================================================
# Pull Request Reviewers
# ==============================================================================


def handle_pr_assign(event: CommentEvent) -> bool:
    """
    Handle /assign and /unassign on a pull request.

    Returns True if the comment held an assign command.
    """
    intent = commands.match(event.comment, event.commenter, CommandFamily.ASSIGN)
    if intent.is_empty:
        return False

    members = set()
    if intent.adds and not intent.conflicts:
        members = gitee_api.list_repository_members(event.org, event.repo)

    result = plan_pr_reviewers(intent, event.assignees, members)

    # Both calls are attempted; their failures are reported together.
    errors = []
    if result.to_remove:
        try:
            gitee_api.unassign_pr_reviewers(event.org, event.repo, event.number,
                                            sorted(result.to_remove))
        except (gitee_api.GiteeAPIError, requests.RequestException) as e:
            logger.error("unassign failed on %s/%s#%s: %s", event.org, event.repo, event.number, e)
            errors.append(e)

    if result.to_add:
        try:
            gitee_api.assign_pr_reviewers(event.org, event.repo, event.number,
                                          sorted(result.to_add))
        except (gitee_api.GiteeAPIError, requests.RequestException) as e:
            logger.error("assign failed on %s/%s#%s: %s", event.org, event.repo, event.number, e)
            errors.append(e)

    reply(event, result.rejections)
    raise_errors(errors, f"updating reviewers of {event.org}/{event.repo}#{event.number} failed")
    return True


# ==============================================================================
# Issue Assignee
# ==============================================================================


def not_eligible(event: CommentEvent, login: str) -> Rejection:
    """
    Describe a forbidden assignment, listing who could be assigned instead.

    The candidate list is best effort: if it can't be fetched the
    rejection is still reported without it.
    """
    try:
        candidates = gitee_api.list_collaborators(event.org, event.repo)
    except (gitee_api.GiteeAPIError, requests.RequestException) as e:
        logger.error("listing collaborators of %s/%s failed: %s", event.org, event.repo, e)
        candidates = set()

    return rejection(RejectionKind.NOT_ELIGIBLE, [login], candidates=tuple(sorted(candidates)))


def handle_issue_assign(event: CommentEvent) -> str | None:
    """
    Handle /assign and /unassign on an issue.

    Returns the issue assignee after the command was applied.
    """
    intent = commands.match(event.comment, event.commenter, CommandFamily.ASSIGN)
    if intent.is_empty:
        return event.assignee

    result = plan_issue_assignee(intent, event.assignee, event.collaborators)
    rejections = list(result.rejections)
    assignee = event.assignee

    # Rejections found so far are posted even if a mutation fails.
    try:
        if result.to_remove:
            gitee_api.unassign_issue(event.org, event.repo, event.number)
            assignee = None

        if result.to_add:
            (login,) = result.to_add
            try:
                gitee_api.assign_issue(event.org, event.repo, event.number, login)
                assignee = login
            except gitee_api.ForbiddenError:
                logger.info("%s can not be assigned to %s/%s#%s", login, event.org, event.repo,
                            event.number)
                rejections.append(not_eligible(event, login))
    finally:
        reply(event, rejections)
    return assignee


# ==============================================================================
# Issue Collaborators
# ==============================================================================


def handle_issue_collaborators(event: CommentEvent, assignee: str | None) -> bool:
    """
    Handle /add-collaborator and /rm-collaborator on an issue.

    `assignee` is the issue assignee after any assign command in the same
    comment. Returns True if the comment held a collaborator command.
    """
    intent = commands.match(event.comment, event.commenter, CommandFamily.COLLABORATOR)
    if intent.is_empty:
        return False

    members = set()
    if not intent.conflicts:
        members = gitee_api.list_repository_members(event.org, event.repo)

    result = plan_issue_collaborators(intent, assignee, event.collaborators, members)

    try:
        if not result.is_noop:
            gitee_api.update_issue_collaborators(event.org, event.repo, event.number,
                                                 encode_collaborators(result.target))
    finally:
        reply(event, result.rejections)
    return True


def handle_issue(event: CommentEvent, config: RepoConfig) -> None:
    """Run the enabled issue handlers; a failure in one does not skip the other."""
    errors = []
    assignee = event.assignee

    if config.enable_issue_assign:
        try:
            assignee = handle_issue_assign(event)
        except Exception as e:
            errors.append(e)

    if config.enable_issue_collaborator:
        try:
            handle_issue_collaborators(event, assignee)
        except Exception as e:
            errors.append(e)

    raise_errors(errors, f"handling {event.org}/{event.repo}#{event.number} failed")


def handle_comment_event(event: CommentEvent, config: RepoConfig) -> None:
    if event.commenter == BOT_NAME:
        logger.debug("Ignoring comment written by %s", BOT_NAME)
        return

    if event.is_pull_request:
        if config.enable_pr_assign:
            handle_pr_assign(event)
        return

    handle_issue(event, config)


# ==============================================================================
# Main
# ==============================================================================


def load_event(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def main():
    """Main entry point for the assign bot."""
    logging.basicConfig(
        level=os.environ.get("ASSIGN_BOT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    event_path = os.environ.get("GITEE_EVENT_PATH")
    if not event_path:
        print("ERROR: GITEE_EVENT_PATH not set", file=sys.stderr)
        sys.exit(1)

    event = CommentEvent.from_payload(load_event(event_path))
    if event is None:
        logger.debug("Event is not a creation of a comment on an open subject, skipping.")
        return

    print(f"Event: comment by {event.commenter} on {event.org}/{event.repo}#{event.number}")

    try:
        config = load_config(os.environ.get("ASSIGN_BOT_CONFIG", DEFAULT_CONFIG_PATH))
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    repo_config = config.config_for(event.org, event.repo)
    if repo_config is None:
        logger.debug("No configuration for %s/%s, skipping.", event.org, event.repo)
        return

    try:
        handle_comment_event(event, repo_config)
    except Exception:
        logger.exception("Handling comment on %s/%s#%s failed", event.org, event.repo,
                         event.number)
        sys.exit(1)


if __name__ == "__main__":
    main()
