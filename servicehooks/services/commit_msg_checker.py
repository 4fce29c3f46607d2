"""Commit message format checker.

On push, checks every commit message against a user-supplied regex and mails
each committer whose commits do not match. Message format, subject,
recipients and template come from the service data.

User templates are string.Template text with the placeholders in
TEMPLATE_FIELDS ($repository, $ref, $push_date, $pusher, $commits).
Liquid templates are not supported: there are no loops or arbitrary event
fields, the per-commit block is fixed (COMMIT_TEMPLATE), and $push_date is
the head commit timestamp as sent, unformatted.
"""

import re
from string import Template
from typing import Any, Dict, List

from servicehooks.services.base import Service
from servicehooks.services.mailer import Mailer

AUTO_MERGE_RE = re.compile(r"^Merge branch '\S+' of \S+$")

TEMPLATE_FIELDS = frozenset({"repository", "ref", "push_date", "pusher", "commits"})

DEFAULT_TEMPLATE = """\
Commits pushed to the repository contained invalid commit messages.

Please see $repository for commit message guidelines.

Push event info
***************
repository: $repository
reference: $ref
push date: $push_date
pusher: $pusher

Commits
*******
$commits
"""

COMMIT_TEMPLATE = """\
committed: {username} / {timestamp}
commit: {url}
message:
{message}

------
"""


def is_auto_generated_commit(commit: Dict[str, Any]) -> bool:
    """Merge commits created by git itself are not checked."""
    return bool(AUTO_MERGE_RE.match(commit.get("message") or ""))


def render_commits(commits: List[Dict[str, Any]]) -> str:
    parts = []
    for c in commits:
        committer = c.get("committer") or {}
        parts.append(
            COMMIT_TEMPLATE.format(
                username=committer.get("username", ""),
                timestamp=c.get("timestamp", ""),
                url=c.get("url", ""),
                message=c.get("message", ""),
            )
        )
    return "".join(parts)


class CommitMsgChecker(Service):
    hook_name = "commit_msg_checker"
    title = "Commit Message Checker"

    def __init__(self, mailer: Mailer | None = None) -> None:
        super().__init__()
        self.mailer = mailer or Mailer()

    def receive_push(self, data: Dict[str, Any], payload: Dict[str, Any]) -> None:
        try:
            pattern = re.compile(data.get("message_format") or "", re.DOTALL)
        except re.error:
            self.raise_config_error("Invalid commit message format specification")
        template = self.get_template(data)

        commits = [
            c
            for c in payload.get("commits") or []
            if not pattern.search(c.get("message") or "") and not is_auto_generated_commit(c)
        ]
        if not commits:
            return

        cc = [r.strip() for r in (data.get("recipients") or "").split(",") if r.strip()]
        subject = self.subject(data, payload)

        by_committer: Dict[str, List[Dict[str, Any]]] = {}
        for c in commits:
            email = (c.get("committer") or {}).get("email")
            if email:
                by_committer.setdefault(email, []).append(c)

        for committer, own in by_committer.items():
            content = self.render(template, payload, own)
            self.mailer.deliver([committer], cc, subject, content)
            self.log.info("Sent commit format notice to %s (%s commits)", committer, len(own))

    def get_template(self, data: Dict[str, Any]) -> Template:
        tpl = Template(data.get("template") or DEFAULT_TEMPLATE)
        if not tpl.is_valid() or not set(tpl.get_identifiers()) <= TEMPLATE_FIELDS:
            self.raise_config_error("Invalid message template")
        return tpl

    def render(self, template: Template, payload: Dict[str, Any], commits: List[Dict[str, Any]]) -> str:
        repository = payload.get("repository") or {}
        head = payload.get("head_commit") or {}
        pusher = payload.get("pusher") or {}
        return template.substitute(
            repository=repository.get("url", ""),
            ref=payload.get("ref", ""),
            push_date=head.get("timestamp", ""),
            pusher=pusher.get("name", ""),
            commits=render_commits(commits),
        )

    def subject(self, data: Dict[str, Any], payload: Dict[str, Any]) -> str:
        s = data.get("subject")
        if s:
            return s
        repository = payload.get("repository") or {}
        owner = (repository.get("owner") or {}).get("name", "")
        return f"[{owner}/{repository.get('name', '')}] commit message format is invalid"
