from unittest import mock

import pytest
from django.core.exceptions import PermissionDenied, ValidationError

from apps.leagues.services import disband_roster
from apps.notifications.models import Notification
from apps.teams.models import Team, TeamInvite, TeamTransfer
from apps.teams.services import (
    accept_invite,
    add_player,
    create_team,
    decline_invite,
    destroy_team,
    invite_user,
    remove_player,
)


@pytest.mark.django_db
def test_create_team_makes_creator_captain_and_player(captain):
    team = create_team(name="Green Giants", captain=captain)

    assert team.captains.filter(pk=captain.pk).exists()
    assert team.on_roster(captain)
    assert TeamTransfer.objects.filter(team=team, user=captain, is_joining=True).count() == 1


@pytest.mark.django_db
def test_create_team_validates_name(captain):
    with pytest.raises(ValidationError):
        create_team(name="x" * 65, captain=captain)
    assert not Team.objects.exists()


@pytest.mark.django_db
def test_team_ledger_is_append_only(team_factory, players):
    team = team_factory("Green Giants")
    u1, u2, u3 = players

    add_player(team, u1)
    add_player(team, u2)
    add_player(team, u3)
    remove_player(team, u2)
    remove_player(team, u3)
    add_player(team, u2)

    assert TeamTransfer.objects.filter(team=team).count() == 6
    assert set(team.users.all()) == {u1, u2}
    history = list(team.transfers.values_list("user_id", "is_joining"))
    assert history == [
        (u1.pk, True),
        (u2.pk, True),
        (u3.pk, True),
        (u2.pk, False),
        (u3.pk, False),
        (u2.pk, True),
    ]


@pytest.mark.django_db
def test_duplicate_add_raises(team, players):
    with pytest.raises(ValidationError):
        add_player(team, players[0])
    assert team.transfers.count() == 0


@pytest.mark.django_db
def test_remove_player_drops_captaincy(team, captain):
    remove_player(team, captain)

    assert not team.captains.filter(pk=captain.pk).exists()
    assert not team.on_roster(captain)


@pytest.mark.django_db
def test_remove_player_keeps_roster_membership(team, roster, players):
    remove_player(team, players[0])

    assert roster.on_roster(players[0])


@pytest.mark.django_db
def test_team_transfer_notifications(team, captain, user_factory, django_capture_on_commit_callbacks):
    newcomer = user_factory("newcomer")

    with django_capture_on_commit_callbacks(execute=True):
        add_player(team, newcomer)

    assert newcomer.notifications.get().message == f"You have been transferred into {team.name}."
    note = captain.notifications.get()
    assert note.type == Notification.Type.TEAM_TRANSFER
    assert newcomer.username in note.message


@pytest.mark.django_db
def test_destroy_team_blocked_by_active_roster(team, roster):
    assert destroy_team(team) is False
    assert Team.objects.filter(pk=team.pk).exists()


@pytest.mark.django_db
def test_destroy_team_after_disbanding(team, roster):
    disband_roster(roster)

    assert destroy_team(team) is True
    assert not Team.objects.filter(pk=team.pk).exists()


@pytest.mark.django_db
def test_destroy_team_without_rosters(team):
    assert destroy_team(team) is True


@pytest.mark.django_db
def test_invite_accept_flow(team, user_factory, django_capture_on_commit_callbacks):
    invitee = user_factory("invitee")

    with django_capture_on_commit_callbacks(execute=True):
        invite = invite_user(team, invitee)
    assert invitee.notifications.filter(type=Notification.Type.TEAM_INVITE).exists()

    accept_invite(invite, invitee)

    assert team.on_roster(invitee)
    assert not TeamInvite.objects.filter(pk=invite.pk).exists()


@pytest.mark.django_db
def test_invite_rejects_members_and_repeat_invites(team, players, user_factory):
    with pytest.raises(ValidationError):
        invite_user(team, players[0])

    invitee = user_factory("invitee")
    invite_user(team, invitee)
    with pytest.raises(ValidationError):
        invite_user(team, invitee)


@pytest.mark.django_db
def test_only_invitee_can_answer_invite(team, user_factory, players):
    invitee = user_factory("invitee")
    invite = invite_user(team, invitee)

    with pytest.raises(PermissionDenied):
        accept_invite(invite, players[0])
    with pytest.raises(PermissionDenied):
        decline_invite(invite, players[0])

    decline_invite(invite, invitee)
    assert not TeamInvite.objects.exists()
    assert not team.on_roster(invitee)


@pytest.mark.django_db
def test_destroy_team_rereads_team_under_lock(team, roster):
    with mock.patch.object(
        Team.objects, "select_for_update", wraps=Team.objects.select_for_update
    ) as lock:
        assert destroy_team(team) is False

    lock.assert_called_once_with()


@pytest.mark.django_db
def test_destroy_team_sees_roster_signed_up_after_load(team, roster_factory, division):
    stale = Team.objects.get(pk=team.pk)
    roster_factory(team, division)

    assert destroy_team(stale) is False
