"""
Celery tasks for the tryouts app.

Related files:
    - models.py: TryoutChat.objects.expired()
    - config/settings.py: CELERY_BEAT_SCHEDULE

Usage:
    from tryouts.tasks import purge_expired_tryout_chats

    purge_expired_tryout_chats.delay()
"""

import logging

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def purge_expired_tryout_chats(self) -> int:
    """
    Delete finished tryout chats past their expiry.

    Chats still live (active or with an offer outstanding) are kept whatever
    their expires_at. Messages go with their chat.

    Returns:
        Number of chats deleted
    """
    from tryouts.models import TryoutChat

    expired = TryoutChat.objects.expired(now=timezone.now())
    chat_ids = list(expired.values_list("pk", flat=True))
    if not chat_ids:
        return 0

    TryoutChat.objects.filter(pk__in=chat_ids).delete()
    logger.info(f"Purged {len(chat_ids)} expired tryout chats")
    return len(chat_ids)
