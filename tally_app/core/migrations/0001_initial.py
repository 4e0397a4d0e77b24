from __future__ import annotations

import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Candidate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "number",
                    models.PositiveSmallIntegerField(
                        unique=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("party_name", models.CharField(max_length=255)),
                ("photo_url", models.CharField(blank=True, default="", max_length=2048)),
                (
                    "theme_color",
                    models.CharField(
                        default="#3B82F6",
                        max_length=7,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^#[0-9A-Fa-f]{6}$",
                                "Theme color must look like #RRGGBB.",
                            )
                        ],
                    ),
                ),
            ],
            options={
                "ordering": ("number", "id"),
            },
        ),
        migrations.CreateModel(
            name="PollingUnit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "grade",
                    models.CharField(help_text="Grade label used to group units on the chart.", max_length=64),
                ),
                ("total_eligible", models.PositiveIntegerField(default=0)),
                ("ballots_issued", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("grade", "name", "id"),
            },
        ),
        migrations.CreateModel(
            name="SystemConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_view_enabled", models.BooleanField(default=False)),
                ("election_title", models.CharField(default="Student Council Election", max_length=255)),
                ("school_name", models.CharField(blank=True, default="", max_length=255)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "System configuration",
                "verbose_name_plural": "System configuration",
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[("SUBMIT", "Submit"), ("RECOUNT", "Recount"), ("LIVE_UPDATE", "Live update")],
                        max_length=16,
                    ),
                ),
                ("polling_unit", models.CharField(max_length=255)),
                ("round", models.PositiveIntegerField(blank=True, null=True)),
                ("details", models.TextField(blank=True, default="")),
                ("reason", models.TextField(blank=True, null=True)),
                ("performed_by", models.CharField(max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Audit log entry",
                "verbose_name_plural": "Audit log entries",
                "ordering": ("-created_at", "-id"),
                "indexes": [models.Index(fields=["created_at"], name="auditlog_created_at")],
            },
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                        max_length=150,
                        unique=True,
                        validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                        verbose_name="username",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text=(
                            "Designates whether this user should be treated as active. "
                            "Unselect this instead of deleting accounts."
                        ),
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                (
                    "role",
                    models.CharField(
                        choices=[("ADMIN", "Admin"), ("STAFF", "Staff")],
                        default="STAFF",
                        max_length=8,
                    ),
                ),
                ("display_name", models.CharField(blank=True, default="", max_length=255)),
                ("active_session_token", models.CharField(blank=True, default="", max_length=64)),
                ("last_seen", models.DateTimeField(blank=True, null=True)),
                (
                    "polling_unit",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_user",
                        to="core.pollingunit",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all permissions "
                            "granted to each of their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="LiveTally",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "tally_type",
                    models.CharField(
                        choices=[("CANDIDATE", "Candidate"), ("NO_VOTE", "No vote"), ("VOID", "Void ballot")],
                        max_length=16,
                    ),
                ),
                ("count", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "candidate",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="live_tallies",
                        to="core.candidate",
                    ),
                ),
                (
                    "polling_unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="live_tallies",
                        to="core.pollingunit",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Live tallies",
                "ordering": ("polling_unit", "tally_type", "candidate", "id"),
                "constraints": [
                    models.UniqueConstraint(
                        fields=("polling_unit", "candidate", "tally_type"),
                        name="uniq_livetally_unit_candidate_type",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("candidate__isnull", True)),
                        fields=("polling_unit", "tally_type"),
                        name="uniq_livetally_unit_category",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("candidate__isnull", False), ("tally_type", "CANDIDATE")),
                            models.Q(models.Q(("tally_type", "CANDIDATE"), _negated=True), ("candidate__isnull", True)),
                            _connector="OR",
                        ),
                        name="livetally_candidate_matches_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UnitSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("total_signatures", models.PositiveIntegerField()),
                ("ballots_issued", models.PositiveIntegerField(default=0)),
                ("ballots_remaining", models.PositiveIntegerField(default=0)),
                ("total_no_vote", models.PositiveIntegerField(default=0)),
                ("total_void_ballots", models.PositiveIntegerField(default=0)),
                ("photo_evidence", models.CharField(blank=True, default="", max_length=2048)),
                ("submitted_by", models.CharField(max_length=150)),
                ("reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "polling_unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submissions",
                        to="core.pollingunit",
                    ),
                ),
            ],
            options={
                "ordering": ("polling_unit", "-round"),
                "constraints": [
                    models.UniqueConstraint(fields=("polling_unit", "round"), name="uniq_unitsubmission_unit_round"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoteResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("vote_count", models.PositiveIntegerField(default=0)),
                ("submitted_by", models.CharField(max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "candidate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vote_results",
                        to="core.candidate",
                    ),
                ),
                (
                    "polling_unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vote_results",
                        to="core.pollingunit",
                    ),
                ),
            ],
            options={
                "ordering": ("polling_unit", "-round", "candidate"),
                "indexes": [models.Index(fields=["polling_unit", "round"], name="voteresult_unit_round")],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("polling_unit", "candidate", "round"),
                        name="uniq_voteresult_unit_candidate_round",
                    ),
                ],
            },
        ),
    ]
