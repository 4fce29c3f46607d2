"""Tests for CommitMsgChecker (mailer mocked)."""

from unittest.mock import MagicMock

import pytest

from servicehooks.errors import ConfigurationError
from servicehooks.services import CommitMsgChecker
from servicehooks.services.commit_msg_checker import is_auto_generated_commit, render_commits


def _commit(message: str, email: str = "dev@example.com", username: str = "dev") -> dict:
    return {
        "message": message,
        "url": "https://github.com/octo/repo/commit/abc",
        "timestamp": "2024-01-15T10:00:00Z",
        "committer": {"email": email, "username": username},
    }


def _payload(*commits: dict) -> dict:
    return {
        "ref": "refs/heads/main",
        "repository": {"url": "https://github.com/octo/repo", "name": "repo", "owner": {"name": "octo"}},
        "pusher": {"name": "dev"},
        "head_commit": {"timestamp": "2024-01-15T10:00:00Z"},
        "commits": list(commits),
    }


@pytest.fixture
def mailer() -> MagicMock:
    return MagicMock()


@pytest.fixture
def checker(mailer: MagicMock) -> CommitMsgChecker:
    return CommitMsgChecker(mailer=mailer)


def test_valid_commits_send_nothing(checker: CommitMsgChecker, mailer: MagicMock) -> None:
    payload = _payload(_commit("JIRA-1 fix"), _commit("Merge branch 'x' of github.com:octo/repo"))
    assert checker.receive("push", {"message_format": r"^[A-Z]+-\d+ "}, payload) is checker
    mailer.deliver.assert_not_called()


def test_invalid_commits_mailed_per_committer(checker: CommitMsgChecker, mailer: MagicMock) -> None:
    payload = _payload(
        _commit("bad one", email="a@example.com", username="alice"),
        _commit("JIRA-2 good", email="a@example.com"),
        _commit("bad two", email="b@example.com", username="bob"),
        _commit("bad three", email="a@example.com", username="alice"),
    )
    data = {"message_format": r"^[A-Z]+-\d+ ", "recipients": "lead@example.com, qa@example.com"}
    checker.receive("push", data, payload)

    assert mailer.deliver.call_count == 2
    first, second = mailer.deliver.call_args_list
    to, cc, subject, body = first.args
    assert to == ["a@example.com"]
    assert cc == ["lead@example.com", "qa@example.com"]
    assert subject == "[octo/repo] commit message format is invalid"
    assert "bad one" in body and "bad three" in body
    assert "bad two" not in body
    assert "repository: https://github.com/octo/repo" in body
    assert second.args[0] == ["b@example.com"]


def test_custom_subject_and_template(checker: CommitMsgChecker, mailer: MagicMock) -> None:
    data = {
        "message_format": "^ok",
        "subject": "Fix your commits",
        "template": "Push to $ref by ${pusher}:\n$commits",
    }
    checker.receive("push", data, _payload(_commit("nope")))
    _, _, subject, body = mailer.deliver.call_args.args
    assert subject == "Fix your commits"
    assert body.startswith("Push to refs/heads/main by dev:\n")
    assert "message:\nnope" in body


def test_invalid_regex_is_configuration_error(checker: CommitMsgChecker) -> None:
    with pytest.raises(ConfigurationError, match="Invalid commit message format specification"):
        checker.receive("push", {"message_format": "(["}, _payload(_commit("x")))


@pytest.mark.parametrize("template", ["Broken $", "Unknown $secret"])
def test_invalid_template_is_configuration_error(checker: CommitMsgChecker, template: str) -> None:
    with pytest.raises(ConfigurationError, match="Invalid message template"):
        checker.receive("push", {"message_format": "^ok", "template": template}, _payload(_commit("x")))


def test_only_push_is_handled(checker: CommitMsgChecker) -> None:
    assert checker.receive("issues", {}, {}) is None


def test_auto_generated_merge_detection() -> None:
    assert is_auto_generated_commit({"message": "Merge branch 'main' of github.com:octo/repo"})
    assert not is_auto_generated_commit({"message": "Merge pull request #1 from octo/x"})


def test_render_commits() -> None:
    text = render_commits([_commit("msg", username="alice")])
    assert "committed: alice / 2024-01-15T10:00:00Z" in text
    assert "commit: https://github.com/octo/repo/commit/abc" in text
