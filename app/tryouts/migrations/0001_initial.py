from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid

import tryouts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TryoutChat",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(blank=True, default=dict, help_text="Flexible key-value metadata storage"),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                ("team_id", models.CharField(db_index=True, max_length=64)),
                ("application_id", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                (
                    "chat_type",
                    models.CharField(
                        choices=[("application", "Application"), ("recruitment", "Recruitment")],
                        default="application",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="active",
                        max_length=16,
                    ),
                ),
                (
                    "tryout_status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("ended_by_team", "Ended by team"),
                            ("ended_by_player", "Ended by player"),
                            ("offer_sent", "Offer sent"),
                            ("offer_accepted", "Offer accepted"),
                            ("offer_rejected", "Offer rejected"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=16,
                    ),
                ),
                (
                    "team_offer_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("pending", "Pending"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                        ],
                        default="none",
                        max_length=16,
                    ),
                ),
                ("offer_sent_at", models.DateTimeField(blank=True, null=True)),
                ("offer_responded_at", models.DateTimeField(blank=True, null=True)),
                ("offer_message", models.TextField(blank=True, default="")),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                (
                    "ended_by_kind",
                    models.CharField(
                        blank=True, choices=[("team", "Team"), ("player", "Player")], default="", max_length=8
                    ),
                ),
                ("end_reason", models.TextField(blank=True, default="")),
                (
                    "expires_at",
                    models.DateTimeField(db_index=True, default=tryouts.models.default_expiry),
                ),
                ("locked", models.BooleanField(default=False)),
                (
                    "applicant",
                    models.ForeignKey(
                        help_text="Player being evaluated",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tryout_applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ended_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who ended the tryout",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participants",
                    models.ManyToManyField(
                        help_text="Users allowed to post in this chat",
                        related_name="tryout_chats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "tryouts_chat",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["team_id", "applicant"], name="tryout_team_applicant_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TryoutMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("message", models.TextField()),
                (
                    "message_type",
                    models.CharField(
                        choices=[("text", "Text"), ("system", "System"), ("team_offer", "Team offer")],
                        default="text",
                        max_length=16,
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "chat",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="tryouts.tryoutchat",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="Author (null for system messages)",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tryout_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "tryouts_message",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["chat", "id"], name="tryout_msg_chat_seq_idx"),
                ],
            },
        ),
    ]
