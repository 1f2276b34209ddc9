from taskdeck.models.auth_magic_link import AuthMagicLink
from taskdeck.models.base import Base
from taskdeck.models.task import Task
from taskdeck.models.user import User
from taskdeck.models.webhook_event import WebhookEvent

__all__ = ["Base", "User", "Task", "AuthMagicLink", "WebhookEvent"]
