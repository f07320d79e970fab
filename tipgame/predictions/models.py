from django.conf import settings
from django.db import models

import reversion

from tipgame.settlement_core.errors import SettlementError
from tipgame.settlement_core.structure import ResultType


RESULT_TYPE_OPTIONS = (
    (ResultType.EXACT_TEXT.value, "Exact text"),
    (ResultType.LIST_SELECTION.value, "List selection"),
    (ResultType.NUMERIC.value, "Whole number"),
    (ResultType.DECIMAL.value, "Decimal number"),
    (ResultType.TIME.value, "Time (HH:MM:SS)"),
    (ResultType.LENGTH.value, "Length (m,cc)"),
    (ResultType.SCORE_WITH_DRAW.value, "Score with draw"),
)


class _BaseModel(models.Model):
    date_created = models.DateTimeField(auto_now_add=True)
    date_modified = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Season(_BaseModel):
    name = models.CharField(max_length=255)
    tag = models.SlugField(unique=True)
    is_active = models.BooleanField(default=False)

    def __str__(self):
        return self.name


class Event(_BaseModel):
    season = models.ForeignKey(Season, on_delete=models.CASCADE, related_name="events")
    name = models.CharField(max_length=255)
    sequence = models.PositiveIntegerField()
    is_settled = models.BooleanField(default=False)

    class Meta:
        ordering = ["season", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["season", "sequence"], name="unique_event_sequence"
            )
        ]

    def __str__(self):
        return f"{self.season} - {self.name}"


@reversion.register()
class Question(_BaseModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="questions")
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
    )
    group_code = models.PositiveIntegerField()
    lineup = models.PositiveIntegerField(default=0)
    text = models.CharField(max_length=255, blank=True)
    points = models.FloatField(default=0)
    margin = models.PositiveIntegerField(null=True, blank=True)
    step = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    decimals = models.PositiveSmallIntegerField(null=True, blank=True)
    result_type = models.CharField(max_length=16, choices=RESULT_TYPE_OPTIONS)

    class Meta:
        ordering = ["event", "group_code", "lineup", "id"]

    def __str__(self):
        return self.text or f"Question {self.pk}"


class ListItem(_BaseModel):
    question = models.ForeignKey(
        Question, on_delete=models.CASCADE, related_name="list_items"
    )
    label = models.CharField(max_length=255)
    lineup = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["question", "lineup", "id"]

    def __str__(self):
        return self.label


class Answer(_BaseModel):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="answers")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="answers"
    )
    result = models.CharField(max_length=255)
    label = models.CharField(max_length=255)
    posted = models.BooleanField(default=True)
    list_item = models.ForeignKey(
        ListItem, on_delete=models.SET_NULL, null=True, blank=True
    )
    points = models.FloatField(default=0)
    score = models.FloatField(default=0)
    correct = models.BooleanField(default=False)
    gray = models.BooleanField(default=False)

    class Meta:
        indexes = [
            models.Index(fields=["question", "user"], name="answer_question_user_idx")
        ]

    def __str__(self):
        return f"{self.user} - {self.label}"


@reversion.register()
class Solution(_BaseModel):
    question = models.ForeignKey(
        Question, on_delete=models.CASCADE, related_name="solutions"
    )
    result = models.CharField(max_length=255)
    list_item = models.ForeignKey(
        ListItem, on_delete=models.SET_NULL, null=True, blank=True
    )

    def __str__(self):
        return f"{self.question} = {self.result}"


class Squad(_BaseModel):
    name = models.CharField(max_length=255)

    def __str__(self):
        return self.name


class SquadMember(_BaseModel):
    squad = models.ForeignKey(Squad, on_delete=models.CASCADE, related_name="members")
    season = models.ForeignKey(Season, on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    is_captain = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["season", "user"], name="one_squad_per_season"
            )
        ]

    def __str__(self):
        return f"{self.squad} - {self.user}"


class SnapshotImmutableError(SettlementError):
    pass


class SquadSnapshot(_BaseModel):
    squad = models.ForeignKey(Squad, on_delete=models.CASCADE, related_name="snapshots")
    season = models.ForeignKey(Season, on_delete=models.CASCADE)
    sequence = models.PositiveIntegerField()
    margin_aware = models.BooleanField(default=False)
    score = models.FloatField(default=0)
    seed = models.PositiveIntegerField(default=0)
    previous_seed = models.PositiveIntegerField(default=0)
    previous_score = models.FloatField(default=0)
    movement = models.IntegerField(default=0)

    class Meta:
        ordering = ["season", "sequence", "seed"]
        constraints = [
            models.UniqueConstraint(
                fields=["squad", "season", "sequence", "margin_aware"],
                name="unique_squad_snapshot",
            )
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise SnapshotImmutableError(f"Snapshot {self.pk} is already stored")
        super().save(*args, **kwargs)

    @property
    def evolution(self):
        if self.movement > 0:
            return "up"
        if self.movement < 0:
            return "down"
        return "equal"

    def __str__(self):
        return f"{self.squad} #{self.seed} ({self.sequence})"


class SquadSnapshotMember(_BaseModel):
    snapshot = models.ForeignKey(
        SquadSnapshot, on_delete=models.CASCADE, related_name="contributions"
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    contribution = models.FloatField(default=0)


class BundleLock(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE)
    group_code = models.PositiveIntegerField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["event", "group_code"], name="unique_bundle_lock"
            )
        ]
