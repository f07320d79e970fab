"""
Per-bundle exclusion lock.

Settlement of a bundle and resubmission of an answer in that bundle both
mutate the same answer rows. Both run inside ``bundle_lock`` which opens a
transaction and locks the bundle's BundleLock row until it commits, so a
settlement run never reads a half-replaced margin ladder.
"""

from contextlib import contextmanager

from django.db import transaction

from tipgame.predictions.models import BundleLock


@contextmanager
def bundle_lock(event_id: int, group_code: int):
    with transaction.atomic():
        BundleLock.objects.get_or_create(event_id=event_id, group_code=group_code)
        lock = BundleLock.objects.select_for_update().get(
            event_id=event_id, group_code=group_code
        )
        yield lock
