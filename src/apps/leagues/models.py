from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxLengthValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.urls import reverse

from .validators import validate_player_count


class League(models.Model):
    class Status(models.TextChoices):
        HIDDEN = "hidden", "Hidden"
        RUNNING = "running", "Running"
        COMPLETED = "completed", "Completed"

    name = models.CharField(max_length=64, validators=[MinLengthValidator(1)])
    description = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.HIDDEN, db_index=True
    )
    signuppable = models.BooleanField(default=False)
    min_players = models.PositiveIntegerField(default=1)
    # 0 means no upper bound
    max_players = models.PositiveIntegerField(default=0)
    allow_disbanding = models.BooleanField(default=False)
    forfeit_all_matches_when_roster_disbands = models.BooleanField(default=True)
    transfers_require_approval = models.BooleanField(default=True)
    admins = models.ManyToManyField(
        settings.AUTH_USER_MODEL, blank=True, related_name="administered_leagues"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    def get_absolute_url(self) -> str:
        return reverse("leagues:detail", args=[self.pk])

    def clean(self):
        if self.max_players and self.max_players < self.min_players:
            raise ValidationError(
                {"max_players": "Must be 0 (no limit) or at least the minimum player count."}
            )


class Division(models.Model):
    league = models.ForeignKey(League, on_delete=models.CASCADE, related_name="divisions")
    name = models.CharField(max_length=64, validators=[MinLengthValidator(1)])

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.league.name} / {self.name}"


class Roster(models.Model):
    team = models.ForeignKey("teams.Team", on_delete=models.CASCADE, related_name="rosters")
    # Denormalized from division so a team can be held to one roster per league.
    league = models.ForeignKey(
        League, on_delete=models.CASCADE, related_name="rosters", editable=False
    )
    division = models.ForeignKey(Division, on_delete=models.CASCADE, related_name="rosters")
    name = models.CharField(max_length=64, validators=[MinLengthValidator(1)])
    description = models.TextField(
        blank=True, default="", validators=[MaxLengthValidator(1000)]
    )
    notice = models.TextField(blank=True, default="")
    ranking = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    seeding = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    approved = models.BooleanField(default=False, db_index=True)
    disbanded = models.BooleanField(default=False, db_index=True)
    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL, through="RosterPlayer", related_name="rosters"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["division", "name"], name="uq_roster_division_name"),
            models.UniqueConstraint(fields=["team", "league"], name="uq_roster_team_league"),
        ]

    def __str__(self) -> str:
        return self.name

    def get_absolute_url(self) -> str:
        return reverse("leagues:roster_edit", args=[self.pk])

    def _sync_league(self):
        if self.division_id is not None:
            self.league_id = self.division.league_id

    def clean_fields(self, exclude=None):
        self._sync_league()
        super().clean_fields(exclude=exclude)

    def save(self, *args, **kwargs):
        self._sync_league()
        if self.division_id is not None:
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "division" in update_fields:
                kwargs["update_fields"] = {*update_fields, "league"}
        super().save(*args, **kwargs)

    def clean(self):
        errors = {}
        if self.division_id is not None:
            league = self.division.league
            others = Roster.objects.exclude(pk=self.pk)
            if self.name and others.filter(division_id=self.division_id, name=self.name).exists():
                errors["name"] = "A roster with this name already exists in the division."
            if self.team_id is not None and others.filter(team_id=self.team_id, league=league).exists():
                errors["team"] = "This team already has a roster in the league."
            if self.pk is not None:
                try:
                    validate_player_count(league, self.player_count)
                except ValidationError as exc:
                    errors.update(exc.error_dict)
        if errors:
            raise ValidationError(errors)

    @property
    def state(self) -> str:
        if self.disbanded:
            return "disbanded"
        return "approved" if self.approved else "pending"

    @property
    def player_count(self) -> int:
        if self.pk is None:
            return 0
        return self.players.count()

    @property
    def matches(self):
        return Match.objects.filter(Q(home_team=self) | Q(away_team=self))

    def has_confirmed_matches(self) -> bool:
        return self.matches.filter(status=Match.Status.CONFIRMED).exists()

    def on_roster(self, user) -> bool:
        return self.players.filter(user=user).exists()

    def users_off_roster(self):
        return self.team.users.exclude(pk__in=self.players.values("user_id"))


class RosterPlayer(models.Model):
    roster = models.ForeignKey(Roster, on_delete=models.CASCADE, related_name="players")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="roster_players"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["roster", "user"], name="uq_roster_player_roster_user")
        ]

    def __str__(self) -> str:
        return f"{self.user} on {self.roster}"


class RosterTransfer(models.Model):
    """Append-only record of a user joining or leaving a roster."""

    roster = models.ForeignKey(Roster, on_delete=models.CASCADE, related_name="transfers")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="roster_transfers"
    )
    is_joining = models.BooleanField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        direction = "into" if self.is_joining else "out of"
        return f"{self.user} {direction} {self.roster}"


class RosterTransferRequest(models.Model):
    roster = models.ForeignKey(
        Roster, on_delete=models.CASCADE, related_name="transfer_requests"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="transfer_requests"
    )
    is_joining = models.BooleanField()
    # Also move the user onto/off the owning team when the request completes.
    propagate = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_transfer_requests",
    )
    # Null while pending; PROTECT keeps completed requests from reverting.
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="approved_transfer_requests",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["roster", "approved_by"], name="transfer_req_roster_appr_idx"),
        ]

    def __str__(self) -> str:
        direction = "into" if self.is_joining else "out of"
        return f"Request: {self.user} {direction} {self.roster}"

    @property
    def is_pending(self) -> bool:
        return self.approved_by_id is None


class Match(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SUBMITTED_BY_HOME_TEAM = "submitted_by_home_team", "Submitted by home team"
        SUBMITTED_BY_AWAY_TEAM = "submitted_by_away_team", "Submitted by away team"
        CONFIRMED = "confirmed", "Confirmed"

    class Forfeit(models.TextChoices):
        NO_FORFEIT = "no_forfeit", "No forfeit"
        HOME_TEAM_FORFEIT = "home_team_forfeit", "Home team forfeit"
        AWAY_TEAM_FORFEIT = "away_team_forfeit", "Away team forfeit"
        MUTUAL_FORFEIT = "mutual_forfeit", "Mutual forfeit"
        TECHNICAL_FORFEIT = "technical_forfeit", "Technical forfeit"

    home_team = models.ForeignKey(
        Roster, on_delete=models.CASCADE, related_name="home_team_matches"
    )
    # Null away team is a bye.
    away_team = models.ForeignKey(
        Roster,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="away_team_matches",
    )
    status = models.CharField(
        max_length=32, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    forfeit_by = models.CharField(
        max_length=32, choices=Forfeit.choices, default=Forfeit.NO_FORFEIT
    )
    round_name = models.CharField(max_length=64, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "matches"

    def __str__(self) -> str:
        away = self.away_team.name if self.away_team_id else "BYE"
        return f"{self.home_team.name} vs {away}"

    def clean(self):
        if self.away_team_id is None:
            return
        if self.away_team_id == self.home_team_id:
            raise ValidationError({"away_team": "A roster cannot play itself."})
        if self.away_team.league_id != self.home_team.league_id:
            raise ValidationError({"away_team": "Both rosters must be in the same league."})
