import logging

from django.db import DatabaseError, transaction
from django.utils.text import Truncator

from .models import Notification

logger = logging.getLogger(__name__)

MESSAGE_MAX_LENGTH = Notification._meta.get_field("message").max_length


def create_notification(*, recipient, type, message, link=""):
    if not recipient:
        return None
    return Notification.objects.create(
        recipient=recipient,
        type=type,
        message=Truncator(message).chars(MESSAGE_MAX_LENGTH),
        link=link,
    )


def _deliver(recipient, type, message, link):
    try:
        create_notification(recipient=recipient, type=type, message=message, link=link)
    except DatabaseError:
        logger.exception("Failed to notify user %s: %s", getattr(recipient, "pk", None), message)


def notify(recipient, message, link="", *, type=Notification.Type.ROSTER_TRANSFER):
    """
    Queue an in-app notification for after the current transaction commits.

    Delivery is fire-and-forget: a failed insert is logged and dropped, and
    never rolls back the write that triggered it.
    """
    if not recipient:
        return
    transaction.on_commit(lambda: _deliver(recipient, type, message, link))


def notify_many(recipients, message, link="", *, type=Notification.Type.ROSTER_TRANSFER):
    for recipient in recipients:
        notify(recipient, message, link, type=type)
