import pytest
from django.contrib.auth.models import AnonymousUser

from apps.accounts.permissions import (
    is_admin,
    user_can_destroy_roster,
    user_can_disband_roster,
    user_can_edit_league,
    user_can_edit_roster,
    user_can_edit_team,
    user_can_sign_up,
    users_who_can_edit_team,
)
from apps.leagues.models import Match


@pytest.mark.django_db
def test_site_admin_can_edit_everything(site_admin, league, team, roster):
    assert is_admin(site_admin)
    assert user_can_edit_league(site_admin, league)
    assert user_can_edit_team(site_admin, team)
    assert user_can_edit_roster(site_admin, roster)


@pytest.mark.django_db
def test_anonymous_user_can_edit_nothing(league, team, roster):
    anonymous = AnonymousUser()
    assert not user_can_edit_league(anonymous, league)
    assert not user_can_edit_team(anonymous, team)
    assert not user_can_sign_up(anonymous, league)
    assert not user_can_destroy_roster(anonymous, roster)


@pytest.mark.django_db
def test_captain_and_league_admin_roles(captain, league_admin, players, league, team, roster):
    assert user_can_edit_team(captain, team)
    assert not user_can_edit_league(captain, league)
    assert user_can_edit_roster(captain, roster)
    assert user_can_edit_roster(league_admin, roster)
    assert not user_can_edit_team(league_admin, team)
    assert not user_can_edit_roster(players[0], roster)


@pytest.mark.django_db
def test_sign_up_requires_signuppable_league(captain, league):
    assert user_can_sign_up(captain, league)
    league.signuppable = False
    assert not user_can_sign_up(captain, league)


@pytest.mark.django_db
def test_captain_disbanding_depends_on_league(captain, league_admin, league, roster):
    assert not user_can_disband_roster(captain, roster)
    assert user_can_disband_roster(league_admin, roster)

    league.allow_disbanding = True
    league.save()
    roster.refresh_from_db()
    assert user_can_disband_roster(captain, roster)

    roster.disbanded = True
    assert not user_can_disband_roster(league_admin, roster)


@pytest.mark.django_db
def test_confirmed_matches_block_captain_destroy(
    captain, league_admin, team_factory, roster_factory, division, roster
):
    assert user_can_destroy_roster(captain, roster)

    opponent = roster_factory(team_factory("Blue Bombers"), division)
    Match.objects.create(home_team=opponent, away_team=roster, status=Match.Status.CONFIRMED)

    assert not user_can_destroy_roster(captain, roster)
    assert user_can_destroy_roster(league_admin, roster)


@pytest.mark.django_db
def test_users_who_can_edit_team(site_admin, captain, players, team, user_factory):
    superuser = user_factory("root", is_superuser=True)
    inactive = user_factory("gone")
    inactive.is_active = False
    inactive.save()
    team.captains.add(inactive)

    editors = set(users_who_can_edit_team(team))

    assert editors == {site_admin, captain, superuser}
