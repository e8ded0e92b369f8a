# SPDX-License-Identifier: MIT OR Apache-2.0
# SPDX-FileCopyrightText: The gitee-assign-bot Contributors

"""
Per-repository configuration for the assign bot.

The configuration is a YAML document with a list of items, each naming
the repositories it applies to and which command families are enabled:

    config_items:
      - repos:
          - openeuler                # every repository of an organization
          - src-openeuler/kernel     # a single repository
        excluded_repos:
          - openeuler/website
        enable_pr_assign: true
        enable_issue_assign: true
        enable_issue_collaborator: false

Every feature is disabled unless the item enables it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigError(Exception):
    pass


@dataclass
class RepoConfig:
    repos: list[str]
    excluded_repos: list[str] = field(default_factory=list)
    enable_pr_assign: bool = False
    enable_issue_assign: bool = False
    enable_issue_collaborator: bool = False

    def validate(self) -> None:
        if not self.repos:
            raise ConfigError("each config item must list at least one repo")
        for name in self.repos:
            if not name or name.count("/") > 1:
                raise ConfigError(f"invalid repo '{name}', expected 'org' or 'org/repo'")
        for name in self.excluded_repos:
            if name.count("/") != 1:
                raise ConfigError(f"invalid excluded repo '{name}', expected 'org/repo'")

    def match_level(self, org: str, repo: str) -> int:
        """
        How specifically this item covers org/repo.

        Returns 2 for an exact 'org/repo' entry, 1 for an 'org' entry and
        0 when the item does not apply.
        """
        full_name = f"{org}/{repo}"
        if full_name in self.excluded_repos:
            return 0
        if full_name in self.repos:
            return 2
        if org in self.repos:
            return 1
        return 0


@dataclass
class Configuration:
    config_items: list[RepoConfig] = field(default_factory=list)

    def config_for(self, org: str, repo: str) -> RepoConfig | None:
        """Find the most specific item for a repository, or None."""
        best = None
        best_level = 0
        for item in self.config_items:
            level = item.match_level(org, repo)
            if level > best_level:
                best, best_level = item, level
        return best


def _repo_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"repo list must be a list, got: {value!r}")
    return [str(v) for v in value]


def _flag(raw: dict, name: str) -> bool:
    value = raw.get(name, False)
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be a boolean, got: {value!r}")
    return value


def parse_config(data: dict | None) -> Configuration:
    """Build a validated Configuration from parsed YAML."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    raw_items = data.get("config_items") or []
    if not isinstance(raw_items, list):
        raise ConfigError("config_items must be a list")

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ConfigError(f"config item must be a mapping, got: {raw!r}")
        item = RepoConfig(
            repos=_repo_list(raw.get("repos")),
            excluded_repos=_repo_list(raw.get("excluded_repos")),
            enable_pr_assign=_flag(raw, "enable_pr_assign"),
            enable_issue_assign=_flag(raw, "enable_issue_assign"),
            enable_issue_collaborator=_flag(raw, "enable_issue_collaborator"),
        )
        item.validate()
        items.append(item)

    return Configuration(config_items=items)


def load_config(path: str | Path) -> Configuration:
    """Load the configuration from a YAML file."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config YAML {path}: {e}") from e

    return parse_config(data)
