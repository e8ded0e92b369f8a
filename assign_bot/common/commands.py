# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
Slash-command parsing for assignee and collaborator commands.

Two independent command families are recognized, each on its own line:

  /assign [@login ...]            /unassign [@login ...]
  /add-collaborator [@login ...]  /rm-collaborator [@login ...]

A command line without logins targets the commenter. Every matching line
in a comment is folded into a single Intent for its family.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class CommandFamily(Enum):
    ASSIGN = "assign"
    COLLABORATOR = "collaborator"


class Action(Enum):
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    ADD_COLLABORATOR = "add-collaborator"
    RM_COLLABORATOR = "rm-collaborator"

    @property
    def is_add(self) -> bool:
        return self in (Action.ASSIGN, Action.ADD_COLLABORATOR)


ASSIGN_RE = re.compile(r"^/(un)?assign((?: @?[-\w]+?)*)\s*$", re.IGNORECASE | re.MULTILINE)
COLLABORATOR_RE = re.compile(
    r"^/(add|rm)-collaborator((?: @?[-\w]+?)*)\s*$", re.IGNORECASE | re.MULTILINE
)


@dataclass(frozen=True)
class Command:
    """One recognized command line."""

    action: Action
    logins: tuple[str, ...]


@dataclass(frozen=True)
class Intent:
    """The add/remove login sets requested by one comment for one family."""

    adds: frozenset[str] = frozenset()
    removes: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.adds and not self.removes

    @property
    def conflicts(self) -> frozenset[str]:
        return self.adds & self.removes


def parse_logins(text: str) -> list[str]:
    """Split a login list on whitespace, dropping '@' and empty tokens."""
    logins = []
    for token in text.split():
        login = token.strip("@ ")
        if login:
            logins.append(login)
    return logins


def _action_for(family: CommandFamily, verb: str | None) -> Action:
    verb = (verb or "").lower()
    if family is CommandFamily.ASSIGN:
        return Action.UNASSIGN if verb == "un" else Action.ASSIGN
    return Action.ADD_COLLABORATOR if verb == "add" else Action.RM_COLLABORATOR


def parse_commands(comment: str, commenter: str, family: CommandFamily) -> Iterator[Command]:
    """Yield the commands of one family found in a comment, in comment order."""
    pattern = ASSIGN_RE if family is CommandFamily.ASSIGN else COLLABORATOR_RE

    for match in pattern.finditer(comment or ""):
        logins = parse_logins(match.group(2))
        if not logins:
            logins = [commenter]
        yield Command(action=_action_for(family, match.group(1)), logins=tuple(logins))


def match(comment: str, commenter: str, family: CommandFamily) -> Intent:
    """
    Fold every command line of a family into a single Intent.

    An empty Intent means the comment holds no command for this family.
    """
    adds: set[str] = set()
    removes: set[str] = set()

    for command in parse_commands(comment, commenter, family):
        target = adds if command.action.is_add else removes
        target.update(command.logins)

    return Intent(adds=frozenset(adds), removes=frozenset(removes))
