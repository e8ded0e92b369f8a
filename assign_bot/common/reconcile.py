# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
Turn filtered requests into the minimal change against the remote state.

Nothing here talks to Gitee. The plan_* functions return a
ReconciliationResult that the bot applies with at most one mutation per
direction, and not at all when the result is a no-op.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .commands import Intent
from .eligibility import (
    Rejection,
    filter_issue_assignee,
    filter_issue_collaborators,
    filter_pr_reviewers,
)

# Gitee reads "0" as "no collaborators"; an empty string leaves them unchanged.
EMPTY_COLLABORATORS = "0"


@dataclass(frozen=True)
class Delta:
    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass
class ReconciliationResult:
    """
    What to change on the subject and what to tell the commenter.

    `target` is the complete set the subject should end up with; for issue
    collaborators it is what gets sent to the remote API.
    """

    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()
    target: frozenset[str] = frozenset()
    rejections: list[Rejection] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


def reconcile(current: Iterable[str], target: Iterable[str]) -> Delta:
    current = frozenset(current)
    target = frozenset(target)
    return Delta(to_add=target - current, to_remove=current - target)


def collaborator_target(current: Iterable[str], repo_members: Iterable[str],
                        removes: Iterable[str], adds: Iterable[str]) -> frozenset[str]:
    """
    Compute the collaborator set an issue should have.

    Current collaborators who are no longer repository members are dropped
    even when nobody asked for it.
    """
    return (frozenset(current) & frozenset(repo_members)) - frozenset(removes) | frozenset(adds)


def encode_collaborators(logins: Iterable[str]) -> str:
    """Serialize a collaborator set for the issue update call."""
    logins = sorted(logins)
    if not logins:
        return EMPTY_COLLABORATORS
    return ",".join(logins)


def _result(current: frozenset[str], target: frozenset[str],
            rejections: list[Rejection]) -> ReconciliationResult:
    delta = reconcile(current, target)
    return ReconciliationResult(
        to_add=delta.to_add,
        to_remove=delta.to_remove,
        target=target,
        rejections=rejections,
    )


def plan_pr_reviewers(intent: Intent, current_assignees: Iterable[str],
                      repo_members: Iterable[str]) -> ReconciliationResult:
    current = frozenset(current_assignees)
    filtered = filter_pr_reviewers(intent, current, repo_members)
    if filtered.aborted:
        return ReconciliationResult(target=current, rejections=filtered.rejections)

    target = (current | filtered.adds) - filtered.removes
    return _result(current, target, filtered.rejections)


def plan_issue_assignee(intent: Intent, current_assignee: str | None,
                        current_collaborators: Iterable[str]) -> ReconciliationResult:
    current = frozenset([current_assignee]) if current_assignee else frozenset()
    filtered = filter_issue_assignee(intent, current_assignee, current_collaborators)
    if filtered.aborted:
        return ReconciliationResult(target=current, rejections=filtered.rejections)

    target = (current - filtered.removes) | filtered.adds
    return _result(current, target, filtered.rejections)


def plan_issue_collaborators(intent: Intent, current_assignee: str | None,
                             current_collaborators: Iterable[str],
                             repo_members: Iterable[str]) -> ReconciliationResult:
    current = frozenset(current_collaborators)
    members = frozenset(repo_members)
    filtered = filter_issue_collaborators(intent, current_assignee, current, members)
    if filtered.aborted:
        return ReconciliationResult(target=current, rejections=filtered.rejections)

    target = collaborator_target(current, members, filtered.removes, filtered.adds)
    return _result(current, target, filtered.rejections)
