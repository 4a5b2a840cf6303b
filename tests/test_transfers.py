import pytest
from django.core.exceptions import ValidationError

from apps.leagues.models import Division, RosterTransfer, RosterTransferRequest
from apps.leagues.services import disband_roster
from apps.leagues.transfers import (
    add_roster_player,
    approve_transfer_request,
    create_transfer_request,
    deny_transfer_request,
    remove_roster_player,
)
from apps.notifications.models import Notification
from apps.teams.models import TeamTransfer


@pytest.mark.django_db
def test_add_and_remove_roster_player_append_to_ledger(roster, players):
    add_roster_player(roster, players[2])
    remove_roster_player(roster, players[2])

    entries = list(
        RosterTransfer.objects.filter(roster=roster, user=players[2]).values_list(
            "is_joining", flat=True
        )
    )
    assert entries == [True, False]
    assert not roster.on_roster(players[2])


@pytest.mark.django_db
def test_add_roster_player_twice_raises(roster, players):
    with pytest.raises(ValidationError):
        add_roster_player(roster, players[0])


@pytest.mark.django_db
def test_remove_player_not_on_roster_raises(roster, players):
    with pytest.raises(ValidationError):
        remove_roster_player(roster, players[2])


@pytest.mark.django_db
def test_roster_transfer_notifies_user_and_captains(
    roster, captain, players, league, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        add_roster_player(roster, players[2])

    own = players[2].notifications.get()
    assert own.message == f"You have been transferred into {roster.name} for {league.name}."
    captain_note = captain.notifications.get()
    assert captain_note.message == (
        f"{players[2].username} has been transferred into {roster.name} for {league.name}."
    )


@pytest.mark.django_db
def test_request_needs_approval_and_notifies_league_admins(
    roster, players, captain, league_admin, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        request = create_transfer_request(
            roster=roster, user=players[2], is_joining=True, created_by=captain
        )

    assert request.is_pending
    assert not roster.on_roster(players[2])
    note = league_admin.notifications.get()
    assert note.type == Notification.Type.TRANSFER_REQUEST


@pytest.mark.django_db
def test_request_completes_immediately_without_approval(league, roster, players, captain):
    league.transfers_require_approval = False
    league.save()

    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=captain
    )

    assert request.approved_by == captain
    assert roster.on_roster(players[2])


@pytest.mark.django_db
def test_duplicate_pending_request_is_rejected(roster, players, captain):
    create_transfer_request(roster=roster, user=players[2], is_joining=True, created_by=captain)

    with pytest.raises(ValidationError):
        create_transfer_request(
            roster=roster, user=players[2], is_joining=True, created_by=captain
        )


@pytest.mark.django_db
def test_joining_requires_team_membership_unless_propagated(
    roster, captain, user_factory, league_admin
):
    outsider = user_factory("outsider")
    with pytest.raises(ValidationError) as excinfo:
        create_transfer_request(
            roster=roster, user=outsider, is_joining=True, created_by=captain
        )
    assert "user" in excinfo.value.message_dict

    request = create_transfer_request(
        roster=roster, user=outsider, is_joining=True, propagate=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert roster.on_roster(outsider)
    assert roster.team.on_roster(outsider)
    assert TeamTransfer.objects.filter(team=roster.team, user=outsider, is_joining=True).exists()


@pytest.mark.django_db
def test_joining_full_roster_is_rejected(league, roster, players, captain):
    league.max_players = 3
    league.save()

    with pytest.raises(ValidationError) as excinfo:
        create_transfer_request(
            roster=roster, user=players[2], is_joining=True, created_by=captain
        )
    assert "players" in excinfo.value.message_dict


@pytest.mark.django_db
def test_leaving_at_minimum_is_rejected(league, roster, players, captain):
    league.min_players = 3
    league.save()

    with pytest.raises(ValidationError):
        create_transfer_request(
            roster=roster, user=players[0], is_joining=False, created_by=captain
        )


@pytest.mark.django_db
def test_disbanded_roster_rejects_requests(roster, players, captain):
    disband_roster(roster)

    with pytest.raises(ValidationError) as excinfo:
        create_transfer_request(
            roster=roster, user=players[2], is_joining=True, created_by=captain
        )
    assert excinfo.value.code == "invalid_state"


@pytest.mark.django_db
def test_approving_join_moves_player_off_other_rosters(
    league, division, roster, team_factory, roster_factory, players, league_admin
):
    other = roster_factory(
        team_factory("Blue Bombers", members=[players[2]]),
        division,
        members=[players[2]],
        approved=True,
    )

    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert roster.on_roster(players[2])
    assert not other.on_roster(players[2])
    assert RosterTransfer.objects.filter(roster=other, user=players[2], is_joining=False).exists()


@pytest.mark.django_db
def test_disbanded_rosters_in_league_are_left_alone(
    division, roster, team_factory, roster_factory, players, league_admin
):
    other_team = team_factory("Blue Bombers", members=[players[2]])
    other = roster_factory(other_team, division, members=[players[2]], disbanded=True)

    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert other.on_roster(players[2])
    assert roster.on_roster(players[2])


@pytest.mark.django_db
def test_rosters_in_other_leagues_are_left_alone(
    league_factory, roster, team_factory, roster_factory, players, league_admin
):
    other_division = Division.objects.create(league=league_factory("Highlander"), name="Open")
    other = roster_factory(
        team_factory("Blue Bombers", members=[players[2]]), other_division, members=[players[2]]
    )

    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert other.on_roster(players[2])


@pytest.mark.django_db
def test_leaving_with_propagate_removes_from_team(roster, players, league_admin):
    request = create_transfer_request(
        roster=roster, user=players[1], is_joining=False, propagate=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert not roster.on_roster(players[1])
    assert not roster.team.on_roster(players[1])


@pytest.mark.django_db
def test_approving_twice_is_invalid_state(roster, players, league_admin):
    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    with pytest.raises(ValidationError) as excinfo:
        approve_transfer_request(request, approved_by=league_admin)
    assert excinfo.value.code == "invalid_state"


@pytest.mark.django_db
def test_deny_deletes_pending_request(roster, players, captain):
    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=captain
    )

    deny_transfer_request(request)

    assert not RosterTransferRequest.objects.filter(pk=request.pk).exists()


@pytest.mark.django_db
def test_approved_request_cannot_be_denied(roster, players, league_admin):
    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    with pytest.raises(ValidationError) as excinfo:
        deny_transfer_request(request)
    assert excinfo.value.code == "invalid_state"
    assert RosterTransferRequest.objects.filter(pk=request.pk).exists()


@pytest.mark.django_db
def test_under_strength_roster_can_take_players_on(league, roster, players, league_admin):
    league.min_players = 5
    league.save()

    request = create_transfer_request(
        roster=roster, user=players[2], is_joining=True, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert roster.on_roster(players[2])
    assert roster.player_count == 4


@pytest.mark.django_db
def test_over_strength_roster_can_release_players(league, roster, players, league_admin):
    league.max_players = 2
    league.save()

    request = create_transfer_request(
        roster=roster, user=players[1], is_joining=False, created_by=league_admin
    )
    approve_transfer_request(request, approved_by=league_admin)

    assert roster.player_count == 2
