import pytest

from ..common.commands import Intent  # noqa: TID252
from ..common.eligibility import RejectionKind  # noqa: TID252
from ..common.reconcile import (  # noqa: TID252
    EMPTY_COLLABORATORS,
    collaborator_target,
    encode_collaborators,
    plan_issue_assignee,
    plan_issue_collaborators,
    plan_pr_reviewers,
    reconcile,
)

MEMBERS = {"alice", "bob", "carol"}


def test_reconcile_delta():
    delta = reconcile({"a", "b"}, {"b", "c"})
    assert delta.to_add == {"c"}
    assert delta.to_remove == {"a"}
    assert delta.is_noop is False


def test_reconcile_same_sets_is_noop():
    assert reconcile({"a"}, {"a"}).is_noop is True


@pytest.mark.parametrize(
    ["logins", "expected"],
    [
        (set(), "0"),
        ({"bob"}, "bob"),
        ({"carol", "alice", "bob"}, "alice,bob,carol"),
    ],
)
def test_encode_collaborators(logins, expected):
    assert encode_collaborators(logins) == expected


def test_empty_marker_is_not_empty_string():
    assert EMPTY_COLLABORATORS == "0"
    assert encode_collaborators([]) != ""


def test_collaborator_target_self_heals():
    # dave lost repository membership
    assert collaborator_target({"bob", "dave"}, MEMBERS, set(), set()) == {"bob"}


def test_plan_collaborators_empty_intent_drops_non_members():
    result = plan_issue_collaborators(Intent(), None, {"bob", "dave"}, MEMBERS)
    assert result.target == {"bob"}
    assert result.to_remove == {"dave"}
    assert result.is_noop is False


def test_plan_collaborators_non_member_only_is_noop():
    result = plan_issue_collaborators(Intent(adds=frozenset({"dave"})), None, {"bob"}, MEMBERS)
    assert result.is_noop is True
    assert [r.kind for r in result.rejections] == [RejectionKind.NOT_MEMBER]


def test_plan_collaborators_remove_last():
    result = plan_issue_collaborators(Intent(removes=frozenset({"bob"})), None, {"bob"}, MEMBERS)
    assert result.target == frozenset()
    assert encode_collaborators(result.target) == "0"


def test_plan_collaborators_conflict_keeps_current():
    intent = Intent(adds=frozenset({"bob"}), removes=frozenset({"bob"}))
    result = plan_issue_collaborators(intent, None, {"dave"}, MEMBERS)
    assert result.is_noop is True
    assert result.target == {"dave"}


def test_plan_issue_assignee_idempotent():
    result = plan_issue_assignee(Intent(adds=frozenset({"alice"})), "alice", set())
    assert result.is_noop is True
    assert [r.kind for r in result.rejections] == [RejectionKind.ALREADY_ASSIGNED]


def test_plan_issue_assignee_swap():
    intent = Intent(adds=frozenset({"bob"}), removes=frozenset({"alice"}))
    result = plan_issue_assignee(intent, "alice", set())
    assert result.to_remove == {"alice"}
    assert result.to_add == {"bob"}
    assert result.rejections == []


def test_plan_pr_reviewers():
    intent = Intent(adds=frozenset({"bob", "carol", "dave"}), removes=frozenset({"alice", "zed"}))
    result = plan_pr_reviewers(intent, {"alice", "carol"}, MEMBERS)
    assert result.to_add == {"bob"}
    assert result.to_remove == {"alice"}
    assert result.target == {"bob", "carol"}
    assert [r.kind for r in result.rejections] == [RejectionKind.NOT_MEMBER]
