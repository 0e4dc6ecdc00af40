"""
Signals for the training_pay app.
A session that stops counting toward hours drops its ledger rows right away,
without waiting for the next sync.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender="training_pay.TrainingSession")
def drop_rows_of_non_counting_session(sender, instance, created, **kwargs):
    if instance.counts_toward_hours:
        return

    from training_pay.repositories import compensation_repository

    n = compensation_repository.delete_for_session(instance.id)
    if n:
        logger.info("[ledger] session=%s no longer counts, removed %s rows", instance.id, n)
