from .settings import NotifySettings, get_notify_settings
from .smtp import Notifier, NullNotifier, SentNotification, SmtpNotifier, build_notifier

__all__ = [
    "Notifier",
    "NotifySettings",
    "NullNotifier",
    "SentNotification",
    "SmtpNotifier",
    "build_notifier",
    "get_notify_settings",
]
