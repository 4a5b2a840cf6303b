from django.conf import settings
from django.db import models


class Notification(models.Model):
    class Type(models.TextChoices):
        TEAM_INVITE = "TEAM_INVITE", "Team invite"
        TEAM_TRANSFER = "TEAM_TRANSFER", "Team transfer"
        ROSTER_TRANSFER = "ROSTER_TRANSFER", "Roster transfer"
        TRANSFER_REQUEST = "TRANSFER_REQUEST", "Transfer request"
        ROSTER_STATUS = "ROSTER_STATUS", "Roster status"

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    type = models.CharField(max_length=50, choices=Type.choices, db_index=True)
    message = models.CharField(max_length=255)
    link = models.CharField(max_length=255, blank=True, default="")
    is_read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.type} -> {self.recipient}"
