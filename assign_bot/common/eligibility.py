# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
Eligibility rules for assignee, reviewer and collaborator requests.

Each filter takes an Intent plus the remote facts fetched for this
comment and splits the requested logins into the applicable ones and a
list of Rejections. Rules never stop at the first violation: everything
wrong with a command is collected so it can be reported in one comment.

The only short-circuit is a conflict (a login both added and removed),
which aborts the whole command for that family.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .commands import Action, Intent


class RejectionKind(Enum):
    CONFLICT = "conflict"
    NOT_MEMBER = "not-member"
    ALREADY_ASSIGNED = "already-assigned"
    MUTUAL_EXCLUSION = "mutual-exclusion"
    TOO_MANY = "too-many"
    NOT_COLLABORATOR = "not-collaborator"
    NOT_ELIGIBLE = "not-eligible"


@dataclass(frozen=True)
class Rejection:
    """
    A rejected request, tagged with why it was rejected.

    Args:
        kind: The rule that rejected the request
        logins: The offending logins, sorted
        action: The command the logins came from
        assignee: The current issue assignee, when it explains the rejection
        candidates: Logins the commenter could pick instead
    """

    kind: RejectionKind
    logins: tuple[str, ...]
    action: Action | None = None
    assignee: str | None = None
    candidates: tuple[str, ...] = ()


def rejection(kind: RejectionKind, logins: Iterable[str], **kwargs) -> Rejection:
    return Rejection(kind=kind, logins=tuple(sorted(logins)), **kwargs)


@dataclass
class FilterResult:
    """Applicable add/remove sets plus everything that was rejected."""

    adds: frozenset[str] = frozenset()
    removes: frozenset[str] = frozenset()
    rejections: list[Rejection] = field(default_factory=list)
    aborted: bool = False


def _conflict(intent: Intent) -> FilterResult | None:
    conflicts = intent.conflicts
    if not conflicts:
        return None
    return FilterResult(
        rejections=[rejection(RejectionKind.CONFLICT, conflicts)],
        aborted=True,
    )


# ==============================================================================
# Pull Requests
# ==============================================================================


def filter_pr_reviewers(intent: Intent, current_assignees: Iterable[str],
                        repo_members: Iterable[str]) -> FilterResult:
    """
    Filter a /assign or /unassign request on a pull request.

    Adds must be repository members. Removing someone who is not currently
    assigned is silently ignored.
    """
    aborted = _conflict(intent)
    if aborted:
        return aborted

    members = frozenset(repo_members)
    current = frozenset(current_assignees)
    rejections = []

    not_members = intent.adds - members
    if not_members:
        rejections.append(rejection(RejectionKind.NOT_MEMBER, not_members, action=Action.ASSIGN))

    return FilterResult(
        adds=intent.adds & members,
        removes=intent.removes & current,
        rejections=rejections,
    )


# ==============================================================================
# Issue Assignee
# ==============================================================================


def filter_issue_assignee(intent: Intent, current_assignee: str | None,
                          current_collaborators: Iterable[str]) -> FilterResult:
    """
    Filter a /assign or /unassign request on an issue.

    An issue has at most one assignee, so more than one login on either
    side is rejected as a whole. The removal is evaluated first: a comment
    that unassigns the current assignee may assign someone else.
    """
    aborted = _conflict(intent)
    if aborted:
        return aborted

    collaborators = frozenset(current_collaborators)
    rejections = []
    removes: frozenset[str] = frozenset()
    adds: frozenset[str] = frozenset()

    if len(intent.removes) > 1:
        rejections.append(rejection(RejectionKind.TOO_MANY, intent.removes, action=Action.UNASSIGN))
    elif current_assignee and current_assignee in intent.removes:
        removes = frozenset([current_assignee])

    # the assignee as it will be once the removal went through
    assignee = None if removes else current_assignee

    if len(intent.adds) > 1:
        rejections.append(rejection(RejectionKind.TOO_MANY, intent.adds, action=Action.ASSIGN))
    elif intent.adds:
        (candidate,) = intent.adds
        add_rejections = []

        if candidate == assignee:
            add_rejections.append(rejection(
                RejectionKind.ALREADY_ASSIGNED, [candidate], action=Action.ASSIGN, assignee=assignee,
            ))
        if candidate in collaborators:
            add_rejections.append(rejection(
                RejectionKind.MUTUAL_EXCLUSION, [candidate], action=Action.ASSIGN,
            ))
        if assignee and candidate != assignee:
            add_rejections.append(rejection(
                RejectionKind.ALREADY_ASSIGNED, [candidate], action=Action.ASSIGN, assignee=assignee,
            ))

        if add_rejections:
            rejections.extend(add_rejections)
        else:
            adds = intent.adds

    return FilterResult(adds=adds, removes=removes, rejections=rejections)


# ==============================================================================
# Issue Collaborators
# ==============================================================================


def filter_issue_collaborators(intent: Intent, current_assignee: str | None,
                               current_collaborators: Iterable[str],
                               repo_members: Iterable[str]) -> FilterResult:
    """
    Filter an /add-collaborator or /rm-collaborator request on an issue.

    Rules, in reporting order:
      1. the current assignee can not also be a collaborator
      2. collaborators must be repository members
      3. removing someone who is not a collaborator is reported
    """
    aborted = _conflict(intent)
    if aborted:
        return aborted

    members = frozenset(repo_members)
    current = frozenset(current_collaborators)
    rejections = []
    adds = intent.adds

    if current_assignee and current_assignee in adds:
        rejections.append(rejection(
            RejectionKind.MUTUAL_EXCLUSION, [current_assignee], action=Action.ADD_COLLABORATOR,
        ))
        adds = adds - {current_assignee}

    not_members = adds - members
    if not_members:
        rejections.append(rejection(
            RejectionKind.NOT_MEMBER, not_members, action=Action.ADD_COLLABORATOR,
        ))
        adds = adds - not_members

    not_collaborators = intent.removes - current
    if not_collaborators:
        rejections.append(rejection(
            RejectionKind.NOT_COLLABORATOR, not_collaborators, action=Action.RM_COLLABORATOR,
        ))

    return FilterResult(
        adds=adds,
        removes=intent.removes & current,
        rejections=rejections,
    )
