import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.cache import cache

from apps.leagues.models import Division, League, Roster, RosterPlayer
from apps.teams.models import Team, TeamPlayer


@pytest.fixture(autouse=True)
def _clear_cache():
    # Rate limit counters live in the default cache.
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def groups(db):
    admin_group, _ = Group.objects.get_or_create(name="admin")
    return {"admin": admin_group}


@pytest.fixture
def user_factory(db):
    def _create(username, **extra):
        return get_user_model().objects.create_user(
            username=username, password="password123", **extra
        )

    return _create


@pytest.fixture
def site_admin(user_factory, groups):
    user = user_factory("siteadmin")
    user.groups.add(groups["admin"])
    return user


@pytest.fixture
def league_admin(user_factory):
    return user_factory("leagueadmin")


@pytest.fixture
def captain(user_factory):
    return user_factory("captain")


@pytest.fixture
def players(user_factory):
    return [user_factory(f"player{i}") for i in range(1, 4)]


@pytest.fixture
def league_factory(db):
    def _create(name="Sixes", **extra):
        extra.setdefault("status", League.Status.RUNNING)
        extra.setdefault("signuppable", True)
        return League.objects.create(name=name, **extra)

    return _create


@pytest.fixture
def league(league_factory, league_admin):
    league = league_factory(min_players=1, max_players=0)
    league.admins.add(league_admin)
    return league


@pytest.fixture
def division(league):
    return Division.objects.create(league=league, name="Premier")


@pytest.fixture
def team_factory(db):
    def _create(name, captain=None, members=()):
        team = Team.objects.create(name=name)
        if captain is not None:
            team.captains.add(captain)
            TeamPlayer.objects.create(team=team, user=captain)
        for member in members:
            TeamPlayer.objects.create(team=team, user=member)
        return team

    return _create


@pytest.fixture
def team(team_factory, captain, players):
    return team_factory("Red Rockets", captain=captain, members=players)


@pytest.fixture
def roster_factory(db):
    def _create(team, division, name=None, members=(), **extra):
        roster = Roster.objects.create(
            team=team, division=division, name=name or team.name, **extra
        )
        for member in members:
            RosterPlayer.objects.create(roster=roster, user=member)
        return roster

    return _create


@pytest.fixture
def roster(roster_factory, team, division, captain, players):
    return roster_factory(team, division, members=[captain, *players[:2]], approved=True)
