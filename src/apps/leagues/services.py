"""
Roster lifecycle: signup, approval, edits, disbanding and destruction.

    pending --approve--> approved
    pending/approved --disband--> disbanded --undisband--> pending/approved
    pending/approved --destroy--> (deleted)

Every transition runs in one transaction and re-reads the roster under
``select_for_update`` before checking its state, so a racing second call
sees the first call's result instead of applying its effects twice.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts.permissions import users_who_can_edit_team
from apps.notifications.models import Notification
from apps.notifications.utils import notify_many
from .models import Match, Roster, RosterTransferRequest
from .transfers import add_roster_player
from .validators import validate_player_count

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "notice", "ranking", "seeding", "division")


def _lock(roster: Roster) -> Roster:
    return (
        Roster.objects.select_for_update(of=("self",))
        .select_related("league", "team", "division")
        .get(pk=roster.pk)
    )


def _merge_errors(errors: dict, exc: ValidationError) -> None:
    for field, field_errors in exc.error_dict.items():
        errors.setdefault(field, []).extend(field_errors)


def _check_division(roster: Roster, division) -> None:
    if division.league_id != roster.league_id:
        raise ValidationError({"division": "Division belongs to a different league."})


def _notify_captains(roster: Roster, message: str) -> None:
    notify_many(
        users_who_can_edit_team(roster.team),
        message,
        roster.team.get_absolute_url(),
        type=Notification.Type.ROSTER_STATUS,
    )


@transaction.atomic
def create_roster(*, league, team, division, name, users, description="") -> Roster:
    """
    Sign ``team`` up for ``league`` with the given initial players.

    The roster starts unapproved. Each initial player gets a joining entry in
    the roster's transfer ledger. Raises ``ValidationError`` keyed by field
    and writes nothing when any check fails.
    """
    users = list(users)
    if division.league_id != league.pk:
        raise ValidationError({"division": "Division does not belong to this league."})

    errors: dict = {}
    roster = Roster(team=team, division=division, name=name, description=description)
    try:
        roster.full_clean(validate_constraints=False)
    except ValidationError as exc:
        _merge_errors(errors, exc)

    if len({user.pk for user in users}) != len(users):
        errors.setdefault("players", []).append(
            ValidationError("A player can only be selected once.")
        )
    team_user_ids = set(team.players.values_list("user_id", flat=True))
    outsiders = sorted(user.get_username() for user in users if user.pk not in team_user_ids)
    if outsiders:
        errors.setdefault("players", []).append(
            ValidationError(f"Not on {team.name}: {', '.join(outsiders)}.")
        )
    try:
        validate_player_count(league, len(users))
    except ValidationError as exc:
        _merge_errors(errors, exc)

    if errors:
        raise ValidationError(errors)

    roster.save()
    for user in users:
        add_roster_player(roster, user, send_notifications=False)
    logger.info(
        "Roster %s signed up team %s for league %s with %s players",
        roster.pk,
        team.pk,
        league.pk,
        len(users),
    )
    return roster


@transaction.atomic
def approve_roster(roster: Roster, *, name=None, division=None, seeding=None) -> Roster:
    """
    Approve a pending roster, applying the admin's edits in the same save.

    Disbanded rosters must be undisbanded first.
    """
    roster = _lock(roster)
    if roster.approved:
        raise ValidationError("Roster is already approved.", code="invalid_state")
    if roster.disbanded:
        raise ValidationError("Disbanded rosters cannot be approved.", code="invalid_state")

    if name is not None:
        roster.name = name
    if division is not None:
        _check_division(roster, division)
        roster.division = division
    if seeding is not None:
        roster.seeding = seeding
    roster.approved = True
    roster.full_clean(validate_constraints=False)
    roster.save()

    logger.info("Roster %s approved", roster.pk)
    _notify_captains(roster, f"{roster.name} has been approved for {roster.league.name}.")
    return roster


@transaction.atomic
def update_roster(roster: Roster, **changes) -> Roster:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise TypeError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    roster = _lock(roster)
    if changes.get("division") is not None:
        _check_division(roster, changes["division"])
    for field, value in changes.items():
        setattr(roster, field, value)
    try:
        roster.full_clean(validate_constraints=False)
    except ValidationError as exc:
        # Membership only changes through transfers, so an edit is never
        # held back by the current player count.
        errors = {key: errs for key, errs in exc.error_dict.items() if key != "players"}
        if errors:
            raise ValidationError(errors) from exc
    roster.save(update_fields=[*changes, "updated_at"])
    return roster


def forfeit_matches(roster: Roster) -> int:
    """
    Forfeit the roster's side of its matches.

    Confirmed results are only overturned when the league forfeits all
    matches of disbanding rosters.
    """
    now = timezone.now()
    home = Match.objects.filter(home_team=roster)
    away = Match.objects.filter(away_team=roster)
    if not roster.league.forfeit_all_matches_when_roster_disbands:
        home = home.exclude(status=Match.Status.CONFIRMED)
        away = away.exclude(status=Match.Status.CONFIRMED)
    return home.update(forfeit_by=Match.Forfeit.HOME_TEAM_FORFEIT, updated_at=now) + away.update(
        forfeit_by=Match.Forfeit.AWAY_TEAM_FORFEIT, updated_at=now
    )


@transaction.atomic
def disband_roster(roster: Roster) -> bool:
    """
    Disband the roster, forfeit its matches and drop its pending transfer
    requests. Approved requests are kept. Returns False when the roster was
    already disbanded.
    """
    roster = _lock(roster)
    if roster.disbanded:
        logger.info("Roster %s is already disbanded", roster.pk)
        return False

    roster.disbanded = True
    roster.save(update_fields=["disbanded", "updated_at"])
    forfeited = forfeit_matches(roster)
    dropped, _ = RosterTransferRequest.objects.filter(
        roster=roster, approved_by__isnull=True
    ).delete()

    logger.info(
        "Roster %s disbanded: %s matches forfeited, %s pending transfer requests dropped",
        roster.pk,
        forfeited,
        dropped,
    )
    _notify_captains(roster, f"{roster.name} has been disbanded from {roster.league.name}.")
    return True


@transaction.atomic
def undisband_roster(roster: Roster) -> bool:
    """Reverse the disbanded flag only; forfeits and dropped requests stay."""
    roster = _lock(roster)
    if not roster.disbanded:
        return False
    roster.disbanded = False
    roster.save(update_fields=["disbanded", "updated_at"])
    logger.info("Roster %s undisbanded", roster.pk)
    return True


@transaction.atomic
def destroy_roster(roster: Roster) -> bool:
    roster = _lock(roster)
    if roster.disbanded:
        logger.info("Refusing to destroy disbanded roster %s", roster.pk)
        return False
    roster_id = roster.pk
    roster.delete()
    logger.info("Roster %s destroyed", roster_id)
    return True
