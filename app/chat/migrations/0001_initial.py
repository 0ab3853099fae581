from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DirectMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
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
                ("message", models.TextField(help_text="Message text")),
                (
                    "message_type",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("invitation", "Invitation"),
                            ("tournament_reference", "Tournament Reference"),
                            ("tournament_invite", "Tournament Invite"),
                            ("match_scheduled", "Match Scheduled"),
                            ("system", "System"),
                        ],
                        db_index=True,
                        default="text",
                        help_text="Type of message",
                        max_length=32,
                    ),
                ),
                ("invitation_id", models.CharField(blank=True, default="", max_length=64)),
                ("tournament_id", models.CharField(blank=True, default="", max_length=64)),
                ("match_id", models.CharField(blank=True, default="", max_length=64)),
                (
                    "invitation_status",
                    models.CharField(
                        blank=True,
                        choices=[("pending", "Pending"), ("accepted", "Accepted"), ("declined", "Declined")],
                        help_text="Answer state, set only for invitation messages",
                        max_length=16,
                        null=True,
                    ),
                ),
                (
                    "timestamp",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now, help_text="When the message was sent"
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        help_text="User this message is addressed to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_direct_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who sent this message (null for system messages)",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_direct_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_message",
                "ordering": ["timestamp", "id"],
                "indexes": [
                    models.Index(fields=["sender", "receiver", "timestamp"], name="chat_dm_pair_ts_idx"),
                    models.Index(fields=["receiver", "timestamp"], name="chat_dm_receiver_ts_idx"),
                ],
            },
        ),
    ]
