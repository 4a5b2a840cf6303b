import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.accounts.permissions import users_who_can_edit_team
from apps.notifications.models import Notification
from apps.notifications.utils import notify, notify_many
from apps.teams import services as team_services
from .models import Roster, RosterPlayer, RosterTransfer, RosterTransferRequest
from .validators import max_players_error, min_players_error

logger = logging.getLogger(__name__)


def _notify_transfer(roster: Roster, user, *, is_joining: bool) -> None:
    direction = "into" if is_joining else "out of"
    where = f"{roster.name} for {roster.league.name}"
    link = roster.team.get_absolute_url()
    notify(user, f"You have been transferred {direction} {where}.", link)
    notify_many(
        users_who_can_edit_team(roster.team).exclude(pk=user.pk),
        f"{user.get_username()} has been transferred {direction} {where}.",
        link,
    )


@transaction.atomic
def add_roster_player(roster: Roster, user, *, send_notifications: bool = True) -> RosterPlayer:
    if roster.on_roster(user):
        raise ValidationError(
            {"user": f"{user.get_username()} is already on {roster.name}."}, code="unique"
        )
    player = RosterPlayer.objects.create(roster=roster, user=user)
    RosterTransfer.objects.create(roster=roster, user=user, is_joining=True)
    if send_notifications:
        _notify_transfer(roster, user, is_joining=True)
    return player


@transaction.atomic
def remove_roster_player(roster: Roster, user) -> None:
    deleted, _ = RosterPlayer.objects.filter(roster=roster, user=user).delete()
    if not deleted:
        raise ValidationError(
            {"user": f"{user.get_username()} is not on {roster.name}."}, code="invalid"
        )
    RosterTransfer.objects.create(roster=roster, user=user, is_joining=False)
    _notify_transfer(roster, user, is_joining=False)


def _validate_transfer(roster: Roster, user, *, is_joining: bool, propagate: bool) -> None:
    if roster.disbanded:
        raise ValidationError("Players cannot be transferred on a disbanded roster.", code="invalid_state")

    name = user.get_username()
    count = roster.player_count
    if is_joining:
        if roster.on_roster(user):
            raise ValidationError({"user": f"{name} is already on {roster.name}."})
        if not propagate and not roster.team.on_roster(user):
            raise ValidationError({"user": f"{name} is not on {roster.team.name}."})
        # An under-strength roster may still take players on.
        bounds_error = max_players_error(roster.league, count + 1)
    else:
        if not roster.on_roster(user):
            raise ValidationError({"user": f"{name} is not on {roster.name}."})
        bounds_error = min_players_error(roster.league, count - 1)
    if bounds_error:
        raise ValidationError({"players": bounds_error})


def _complete(transfer_request: RosterTransferRequest, approved_by) -> RosterTransferRequest:
    roster = transfer_request.roster
    user = transfer_request.user
    team = roster.team

    if transfer_request.is_joining:
        if transfer_request.propagate and not team.on_roster(user):
            team_services.add_player(team, user)
        # A player can only play for one roster per league.
        others = (
            Roster.objects.select_for_update(of=("self",))
            .filter(league_id=roster.league_id, disbanded=False, players__user=user)
            .exclude(pk=roster.pk)
        )
        for other in others:
            remove_roster_player(other, user)
        add_roster_player(roster, user)
    else:
        remove_roster_player(roster, user)
        if transfer_request.propagate and team.on_roster(user):
            team_services.remove_player(team, user)

    transfer_request.approved_by = approved_by
    transfer_request.save(update_fields=["approved_by", "updated_at"])
    logger.info(
        "Transfer request %s completed by user %s", transfer_request.pk, approved_by.pk
    )
    return transfer_request


@transaction.atomic
def create_transfer_request(
    *, roster: Roster, user, is_joining: bool, created_by, propagate: bool = False
) -> RosterTransferRequest:
    """
    Record a request to move ``user`` onto or off ``roster``.

    Leagues that do not require transfer approval complete the request
    immediately, with the creator recorded as approver.
    """
    roster = (
        Roster.objects.select_for_update(of=("self",))
        .select_related("league", "team")
        .get(pk=roster.pk)
    )
    if RosterTransferRequest.objects.filter(
        roster=roster, user=user, approved_by__isnull=True
    ).exists():
        raise ValidationError(
            {"user": f"{user.get_username()} already has a pending transfer request."},
            code="unique",
        )
    _validate_transfer(roster, user, is_joining=is_joining, propagate=propagate)

    transfer_request = RosterTransferRequest.objects.create(
        roster=roster,
        user=user,
        is_joining=is_joining,
        propagate=propagate,
        created_by=created_by,
    )
    if not roster.league.transfers_require_approval:
        return _complete(transfer_request, created_by)

    direction = "into" if is_joining else "out of"
    notify_many(
        roster.league.admins.all(),
        f"Transfer request: {user.get_username()} {direction} {roster.name}.",
        roster.league.get_absolute_url(),
        type=Notification.Type.TRANSFER_REQUEST,
    )
    return transfer_request


@transaction.atomic
def approve_transfer_request(
    transfer_request: RosterTransferRequest, *, approved_by
) -> RosterTransferRequest:
    transfer_request = (
        RosterTransferRequest.objects.select_for_update(of=("self",))
        .select_related("roster__league", "roster__team", "user")
        .get(pk=transfer_request.pk)
    )
    if not transfer_request.is_pending:
        raise ValidationError("Transfer request was already approved.", code="invalid_state")
    _validate_transfer(
        transfer_request.roster,
        transfer_request.user,
        is_joining=transfer_request.is_joining,
        propagate=transfer_request.propagate,
    )
    return _complete(transfer_request, approved_by)


@transaction.atomic
def deny_transfer_request(transfer_request: RosterTransferRequest) -> None:
    transfer_request = RosterTransferRequest.objects.select_for_update(of=("self",)).get(
        pk=transfer_request.pk
    )
    if not transfer_request.is_pending:
        raise ValidationError("Approved transfer requests cannot be denied.", code="invalid_state")
    request_id = transfer_request.pk
    transfer_request.delete()
    logger.info("Transfer request %s denied", request_id)
