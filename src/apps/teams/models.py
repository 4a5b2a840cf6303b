from django.conf import settings
from django.core.validators import MaxLengthValidator, MinLengthValidator
from django.db import models
from django.urls import reverse


class Team(models.Model):
    name = models.CharField(max_length=64, unique=True, validators=[MinLengthValidator(1)])
    description = models.TextField(
        blank=True, default="", validators=[MaxLengthValidator(1000)]
    )
    notice = models.TextField(blank=True, default="")
    captains = models.ManyToManyField(
        settings.AUTH_USER_MODEL, blank=True, related_name="captained_teams"
    )
    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL, through="TeamPlayer", related_name="teams"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def get_absolute_url(self) -> str:
        return reverse("teams:detail", args=[self.pk])

    def on_roster(self, user) -> bool:
        return self.players.filter(user=user).exists()


class TeamPlayer(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="players")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_players"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["team", "user"], name="uq_team_player_team_user")
        ]

    def __str__(self) -> str:
        return f"{self.user} on {self.team}"


class TeamTransfer(models.Model):
    """Append-only record of a user joining or leaving a team."""

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="transfers")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_transfers"
    )
    is_joining = models.BooleanField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        direction = "into" if self.is_joining else "out of"
        return f"{self.user} {direction} {self.team}"


class TeamInvite(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="invites")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_invites"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["team", "user"], name="uq_team_invite_team_user")
        ]

    def __str__(self) -> str:
        return f"{self.user} invited to {self.team}"
