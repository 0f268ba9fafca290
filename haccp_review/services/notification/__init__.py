"""
Notification dispatch services.
"""

from .notification_dispatcher import NotificationDispatcher
from .notification_rules import DispatchRules

__all__ = ["NotificationDispatcher", "DispatchRules"]
