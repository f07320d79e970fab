"""Drop cached question and list item lookups when the rows change."""
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from tipgame.predictions.models import ListItem, Question
from tipgame.predictions.services import get_service


@receiver(post_save, sender=Question)
@receiver(post_delete, sender=Question)
def on_question_changed(sender, instance, **kwargs):
    get_service().lookups.invalidate_question(instance.pk)


@receiver(post_save, sender=ListItem)
@receiver(post_delete, sender=ListItem)
def on_list_item_changed(sender, instance, **kwargs):
    get_service().lookups.invalidate_list_item(instance.pk)
