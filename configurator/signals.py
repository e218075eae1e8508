import logging

from allauth.account.signals import user_signed_up
from django.db import DatabaseError
from django.dispatch import receiver

from .models import SESSION_KEY, SavedConfiguration

logger = logging.getLogger(__name__)


@receiver(user_signed_up)
def migrate_session_selection(sender, request, user, **kwargs):
    """Keep the build a visitor was working on when they sign up."""
    if request is None:
        return
    ids = request.session.get(SESSION_KEY)
    if not ids:
        return
    try:
        SavedConfiguration.objects.create(
            user=user, name="My first build", selection=ids
        )
    except DatabaseError:
        logger.exception("Failed to migrate session build for user %s", user.pk)
