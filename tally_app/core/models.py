from typing import override

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Q

SYSTEM_CONFIG_PK = 1

DEFAULT_THEME_COLOR = "#3B82F6"

# Largest value a PositiveIntegerField holds on every supported backend.
MAX_COUNT = 2_147_483_647


class Candidate(models.Model):
    number = models.PositiveSmallIntegerField(unique=True, validators=[MinValueValidator(1)])
    name = models.CharField(max_length=255)
    party_name = models.CharField(max_length=255)
    photo_url = models.CharField(max_length=2048, blank=True, default="")
    theme_color = models.CharField(
        max_length=7,
        default=DEFAULT_THEME_COLOR,
        validators=[RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Theme color must look like #RRGGBB.")],
    )

    class Meta:
        ordering = ("number", "id")

    def __str__(self) -> str:
        return f"#{self.number} {self.name}"


class PollingUnit(models.Model):
    name = models.CharField(max_length=255)
    grade = models.CharField(max_length=64, help_text="Grade label used to group units on the chart.")
    total_eligible = models.PositiveIntegerField(default=0)
    ballots_issued = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("grade", "name", "id")

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    class Role(models.TextChoices):
        admin = "ADMIN", "Admin"
        staff = "STAFF", "Staff"

    role = models.CharField(max_length=8, choices=Role.choices, default=Role.staff)
    display_name = models.CharField(max_length=255, blank=True, default="")

    # OneToOne gives the "at most one staff user per unit" uniqueness.
    polling_unit = models.OneToOneField(
        PollingUnit,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="assigned_user",
    )

    # Rotated on every login; a session carrying an older token is treated as logged out.
    active_session_token = models.CharField(max_length=64, blank=True, default="")
    last_seen = models.DateTimeField(blank=True, null=True)

    @property
    def is_election_admin(self) -> bool:
        return self.role == self.Role.admin

    @override
    def save(self, *args, **kwargs) -> None:
        if self.is_superuser:
            self.role = self.Role.admin
        super().save(*args, **kwargs)


class SystemConfig(models.Model):
    """Singleton row (pk=1) seeded at startup by ``core.system_config``."""

    public_view_enabled = models.BooleanField(default=False)
    election_title = models.CharField(max_length=255, default="Student Council Election")
    school_name = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "System configuration"
        verbose_name_plural = "System configuration"

    def __str__(self) -> str:
        return self.election_title


class TallyType(models.TextChoices):
    candidate = "CANDIDATE", "Candidate"
    no_vote = "NO_VOTE", "No vote"
    void = "VOID", "Void ballot"


class LiveTally(models.Model):
    polling_unit = models.ForeignKey(PollingUnit, on_delete=models.CASCADE, related_name="live_tallies")
    candidate = models.ForeignKey(
        Candidate,
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        related_name="live_tallies",
    )
    tally_type = models.CharField(max_length=16, choices=TallyType.choices)
    count = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Live tallies"
        ordering = ("polling_unit", "tally_type", "candidate", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["polling_unit", "candidate", "tally_type"],
                name="uniq_livetally_unit_candidate_type",
            ),
            # NULL candidates never collide in the constraint above.
            models.UniqueConstraint(
                fields=["polling_unit", "tally_type"],
                name="uniq_livetally_unit_category",
                condition=Q(candidate__isnull=True),
            ),
            models.CheckConstraint(
                condition=Q(tally_type="CANDIDATE", candidate__isnull=False)
                | (~Q(tally_type="CANDIDATE") & Q(candidate__isnull=True)),
                name="livetally_candidate_matches_type",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.polling_unit_id}:{self.tally_type}:{self.candidate_id}={self.count}"


class UnitSubmission(models.Model):
    """One official round for a polling unit. Rows are never updated."""

    polling_unit = models.ForeignKey(PollingUnit, on_delete=models.PROTECT, related_name="submissions")
    round = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_signatures = models.PositiveIntegerField()
    ballots_issued = models.PositiveIntegerField(default=0)
    ballots_remaining = models.PositiveIntegerField(default=0)
    total_no_vote = models.PositiveIntegerField(default=0)
    total_void_ballots = models.PositiveIntegerField(default=0)
    photo_evidence = models.CharField(max_length=2048, blank=True, default="")
    submitted_by = models.CharField(max_length=150)
    reason = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("polling_unit", "-round")
        constraints = [
            models.UniqueConstraint(
                fields=["polling_unit", "round"],
                name="uniq_unitsubmission_unit_round",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.polling_unit_id}:round {self.round}"


class VoteResult(models.Model):
    polling_unit = models.ForeignKey(PollingUnit, on_delete=models.PROTECT, related_name="vote_results")
    candidate = models.ForeignKey(Candidate, on_delete=models.PROTECT, related_name="vote_results")
    round = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    vote_count = models.PositiveIntegerField(default=0)
    submitted_by = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("polling_unit", "-round", "candidate")
        constraints = [
            models.UniqueConstraint(
                fields=["polling_unit", "candidate", "round"],
                name="uniq_voteresult_unit_candidate_round",
            ),
        ]
        indexes = [
            models.Index(fields=["polling_unit", "round"], name="voteresult_unit_round"),
        ]

    def __str__(self) -> str:
        return f"{self.polling_unit_id}:{self.candidate_id}:round {self.round}={self.vote_count}"


class AuditLog(models.Model):
    class Action(models.TextChoices):
        submit = "SUBMIT", "Submit"
        recount = "RECOUNT", "Recount"
        live_update = "LIVE_UPDATE", "Live update"

    action = models.CharField(max_length=16, choices=Action.choices)
    # Stored as text so the feed survives unit renames and deletions.
    polling_unit = models.CharField(max_length=255)
    round = models.PositiveIntegerField(blank=True, null=True)
    details = models.TextField(blank=True, default="")
    reason = models.TextField(blank=True, null=True)
    performed_by = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Audit log entry"
        verbose_name_plural = "Audit log entries"
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["created_at"], name="auditlog_created_at"),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.polling_unit}"
