import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from apps.accounts.permissions import users_who_can_edit_team
from apps.notifications.models import Notification
from apps.notifications.utils import notify, notify_many
from .models import Team, TeamInvite, TeamPlayer, TeamTransfer

logger = logging.getLogger(__name__)


def _notify_transfer(team: Team, user, *, is_joining: bool) -> None:
    direction = "into" if is_joining else "out of"
    link = team.get_absolute_url()
    notify(
        user,
        f"You have been transferred {direction} {team.name}.",
        link,
        type=Notification.Type.TEAM_TRANSFER,
    )
    notify_many(
        users_who_can_edit_team(team).exclude(pk=user.pk),
        f"{user.get_username()} has been transferred {direction} {team.name}.",
        link,
        type=Notification.Type.TEAM_TRANSFER,
    )


def _add_player(team: Team, user) -> TeamPlayer:
    if TeamPlayer.objects.filter(team=team, user=user).exists():
        raise ValidationError(
            {"user": f"{user.get_username()} is already on {team.name}."}, code="unique"
        )
    player = TeamPlayer.objects.create(team=team, user=user)
    TeamTransfer.objects.create(team=team, user=user, is_joining=True)
    return player


@transaction.atomic
def create_team(*, name, captain, description="", notice="") -> Team:
    team = Team(name=name, description=description, notice=notice)
    team.full_clean()
    team.save()
    team.captains.add(captain)
    _add_player(team, captain)
    logger.info("Team %s created by user %s", team.pk, captain.pk)
    return team


@transaction.atomic
def add_player(team: Team, user) -> TeamPlayer:
    player = _add_player(team, user)
    _notify_transfer(team, user, is_joining=True)
    return player


@transaction.atomic
def remove_player(team: Team, user) -> None:
    deleted, _ = TeamPlayer.objects.filter(team=team, user=user).delete()
    if not deleted:
        raise ValidationError(
            {"user": f"{user.get_username()} is not on {team.name}."}, code="invalid"
        )
    team.captains.remove(user)
    TeamTransfer.objects.create(team=team, user=user, is_joining=False)
    _notify_transfer(team, user, is_joining=False)


@transaction.atomic
def invite_user(team: Team, user) -> TeamInvite:
    if team.on_roster(user):
        raise ValidationError({"user": f"{user.get_username()} is already on {team.name}."})
    if TeamInvite.objects.filter(team=team, user=user).exists():
        raise ValidationError(
            {"user": f"{user.get_username()} already has a pending invite."}, code="unique"
        )
    invite = TeamInvite.objects.create(team=team, user=user)
    notify(
        user,
        f"You have been invited to join the team: {team.name}.",
        team.get_absolute_url(),
        type=Notification.Type.TEAM_INVITE,
    )
    return invite


@transaction.atomic
def accept_invite(invite: TeamInvite, user) -> TeamPlayer:
    invite = TeamInvite.objects.select_for_update(of=("self",)).select_related("team").get(pk=invite.pk)
    if invite.user_id != user.pk:
        raise PermissionDenied("This invite belongs to another user.")
    player = add_player(invite.team, user)
    invite.delete()
    return player


@transaction.atomic
def decline_invite(invite: TeamInvite, user) -> None:
    if invite.user_id != user.pk:
        raise PermissionDenied("This invite belongs to another user.")
    invite.delete()


@transaction.atomic
def destroy_team(team: Team) -> bool:
    """Delete the team unless it still holds a roster that has not disbanded."""
    team = Team.objects.select_for_update().get(pk=team.pk)
    active = list(
        team.rosters.select_for_update()
        .filter(disbanded=False)
        .values_list("pk", flat=True)
    )
    if active:
        logger.info("Refusing to destroy team %s with active rosters", team.pk)
        return False
    team_id = team.pk
    team.delete()
    logger.info("Team %s destroyed", team_id)
    return True
