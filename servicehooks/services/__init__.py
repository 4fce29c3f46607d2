"""Built-in hook services."""

from servicehooks.services.base import Service
from servicehooks.services.commit_msg_checker import CommitMsgChecker
from servicehooks.services.mailer import Mailer
from servicehooks.services.web import Web

__all__ = ["CommitMsgChecker", "Mailer", "Service", "Web"]
