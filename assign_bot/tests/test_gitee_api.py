import pytest

from .. import gitee_api  # noqa: TID252


class FakeResponse:
    def __init__(self, status_code, payload=None, text="error"):
        self.status_code = status_code
        self.payload = payload
        self.content = b"" if payload is None else b"x"
        self.text = text

    def json(self):
        return self.payload


@pytest.fixture
def requests_log(monkeypatch):
    calls = []
    responses = []

    def fake_request(method, url, **kwargs):
        calls.append({"method": method, "url": url, **kwargs})
        return responses.pop(0)

    monkeypatch.setenv("GITEE_TOKEN", "token")
    monkeypatch.setattr(gitee_api.requests, "request", fake_request)
    return calls, responses


def test_gitee_api_sends_token(requests_log):
    calls, responses = requests_log
    responses.append(FakeResponse(200, {"members": ["alice", "bob"]}))
    assert gitee_api.list_repository_members("org", "repo") == {"alice", "bob"}
    assert calls[0]["method"] == "GET"
    assert calls[0]["url"].endswith("/repos/org/repo")
    assert calls[0]["params"]["access_token"] == "token"


def test_gitee_api_forbidden(requests_log):
    _, responses = requests_log
    responses.append(FakeResponse(403, text="not a collaborator"))
    with pytest.raises(gitee_api.ForbiddenError):
        gitee_api.assign_issue("org", "repo", "I1", "zed")


def test_gitee_api_other_error(requests_log):
    _, responses = requests_log
    responses.append(FakeResponse(500))
    with pytest.raises(gitee_api.GiteeAPIError) as exc_info:
        gitee_api.post_issue_comment("org", "repo", "I1", "hello")
    assert exc_info.value.status_code == 500
    assert not isinstance(exc_info.value, gitee_api.ForbiddenError)


def test_list_collaborators_follows_pages(requests_log, monkeypatch):
    calls, responses = requests_log
    monkeypatch.setattr(gitee_api, "PER_PAGE", 2)
    responses.append(FakeResponse(200, [{"login": "alice"}, {"login": "bob"}]))
    responses.append(FakeResponse(200, [{"login": "carol"}]))
    assert gitee_api.list_collaborators("org", "repo") == {"alice", "bob", "carol"}
    assert [c["params"]["page"] for c in calls] == [1, 2]


def test_update_issue_collaborators_payload(requests_log):
    calls, responses = requests_log
    responses.append(FakeResponse(200, {}))
    gitee_api.update_issue_collaborators("org", "repo", "I1", "0")
    assert calls[0]["method"] == "PATCH"
    assert calls[0]["url"].endswith("/repos/org/issues/I1")
    assert calls[0]["json"] == {"repo": "repo", "collaborators": "0"}


def test_unassign_pr_reviewers_uses_query(requests_log):
    calls, responses = requests_log
    responses.append(FakeResponse(204))
    gitee_api.unassign_pr_reviewers("org", "repo", 7, ["alice", "bob"])
    assert calls[0]["method"] == "DELETE"
    assert calls[0]["params"]["assignees"] == "alice,bob"


def test_missing_token_exits(monkeypatch):
    monkeypatch.delenv("GITEE_TOKEN", raising=False)
    with pytest.raises(SystemExit):
        gitee_api.get_gitee_token()
