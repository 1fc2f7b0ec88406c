import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Notification, ParentStudent

logger = logging.getLogger(__name__)


def notify(type, title, message, sender, receiver):
    return Notification.objects.create(
        type=type,
        title=title,
        message=message,
        sender=sender,
        receiver=receiver,
        is_read=False,
    )


def publish(type, title, message, sender, receiver):
    """
    Best-effort variant of notify() for batch jobs.

    A failed insert is logged and reported as None; the record that triggered
    the notification stays committed.
    """
    try:
        with transaction.atomic():
            return notify(type, title, message, sender, receiver)
    except DatabaseError:
        logger.exception(f"Could not deliver '{title}' notification to account {receiver.pk}")
        return None


def notify_parents(student, type, title, message, sender):
    links = ParentStudent.objects.filter(student=student).select_related('parent')
    sent = 0
    for link in links:
        if publish(type, title, message, sender, link.parent):
            sent += 1
    return sent


def already_notified_today(receiver, type, title, now=None):
    now = now or timezone.now()
    start_of_day = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return Notification.objects.filter(
        receiver=receiver,
        type=type,
        title=title,
        created_at__gte=start_of_day,
    ).exists()
