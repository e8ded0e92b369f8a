# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
User-facing text for rejected commands.

Rejections are rendered one bullet each, in the order the rules produced
them, inside a single reply that mentions the commenter and links the
comment that triggered it.
"""

from __future__ import annotations

from collections.abc import Iterable

from .commands import Action
from .eligibility import Rejection, RejectionKind

RESPONSE_TEMPLATE = "@{commenter} In response to [this]({url}):\n{bullets}"


def _people(logins: Iterable[str]) -> str:
    return ", ".join(logins)


def render_rejection(item: Rejection) -> str:
    """Render one Rejection as a single line of Markdown."""
    people = _people(item.logins)

    if item.kind is RejectionKind.CONFLICT:
        return (f"Conflicting request for **{people}**: the same person can not be "
                f"added and removed in one comment. Nothing was changed.")

    if item.kind is RejectionKind.NOT_MEMBER:
        if item.action is Action.ADD_COLLABORATOR:
            return (f"These people (**{people}**) are not a repository member and can not "
                    f"be added as collaborators of the issue.")
        return (f"These people (**{people}**) are not a repository member and can not "
                f"be assigned as reviewers of the pull request.")

    if item.kind is RejectionKind.ALREADY_ASSIGNED:
        if item.assignee in item.logins:
            return (f"This issue is already assigned to ***{item.assignee}***. "
                    f"Please do not assign repeatedly.")
        return (f"This issue is already assigned to ***{item.assignee}***. Only one assignee "
                f"is allowed, please unassign them before assigning ***{people}***.")

    if item.kind is RejectionKind.MUTUAL_EXCLUSION:
        if item.action is Action.ADD_COLLABORATOR:
            return (f"The assignee (***{people}***) can't be a collaborator of the issue "
                    f"at the same time.")
        return (f"***{people}*** is already a collaborator of the issue and can not be "
                f"assigned as the assignee.")

    if item.kind is RejectionKind.TOO_MANY:
        if item.action is Action.UNASSIGN:
            return (f"Can only unassign one person from the issue, "
                    f"got ***{people}***. Nothing was unassigned.")
        return (f"Can only assign one assignee to the issue, "
                f"got ***{people}***. Nothing was assigned.")

    if item.kind is RejectionKind.NOT_COLLABORATOR:
        return (f"These people (**{people}**) are not current collaborators of the issue "
                f"and do not need to be removed.")

    if item.kind is RejectionKind.NOT_ELIGIBLE:
        message = (f"This issue can not be assigned to ***{people}***. "
                   f"They are not eligible: the assignee must be a repository collaborator.")
        if item.candidates:
            message += (f" Choose one of the following collaborators as assignee: "
                        f"{_people(item.candidates)}.")
        return message

    raise ValueError(f"Unknown rejection kind: {item.kind}")


def compose(commenter: str, comment_url: str, messages: Iterable[str]) -> str | None:
    """
    Build the reply for a comment.

    Returns None when there is nothing to report, so successful and no-op
    commands stay silent.
    """
    messages = list(messages)
    if not messages:
        return None

    bullets = "\n".join(f"- {message}" for message in messages)
    return RESPONSE_TEMPLATE.format(commenter=commenter, url=comment_url, bullets=bullets)


def compose_rejections(commenter: str, comment_url: str,
                       rejections: Iterable[Rejection]) -> str | None:
    return compose(commenter, comment_url, [render_rejection(r) for r in rejections])
