from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.permissions import ADMIN_GROUP, ensure_group
from apps.leagues.models import Division, League, Match, Roster
from apps.leagues.services import approve_roster, create_roster
from apps.teams.models import Team
from apps.teams.services import add_player, create_team

DEMO_PASSWORD = "password123"


class Command(BaseCommand):
    help = "Seed demo users, teams, a league and its rosters"

    @transaction.atomic
    def handle(self, *args, **options):
        user_model = get_user_model()
        admin_group = ensure_group(ADMIN_GROUP)

        users = {}
        for username in ["admin1", "captain1", "captain2", "player1", "player2", "player3"]:
            user, created = user_model.objects.get_or_create(username=username)
            if created:
                user.set_password(DEMO_PASSWORD)
            if username == "admin1":
                user.is_staff = True
                user.is_superuser = True
            user.save()
            users[username] = user
        users["admin1"].groups.add(admin_group)

        league, created = League.objects.get_or_create(
            name="Demo League",
            defaults={
                "description": "Sixes league for the demo season.",
                "status": League.Status.RUNNING,
                "signuppable": True,
                "min_players": 2,
                "max_players": 6,
                "allow_disbanding": True,
            },
        )
        league.admins.add(users["admin1"])
        division, _ = Division.objects.get_or_create(league=league, name="Premier")

        lineups = [
            ("Red Rockets", "captain1", ["player1", "player2"]),
            ("Blue Bombers", "captain2", ["player3"]),
        ]
        rosters = []
        for team_name, captain, players in lineups:
            team = Team.objects.filter(name=team_name).first()
            if team is None:
                team = create_team(name=team_name, captain=users[captain])
                for username in players:
                    add_player(team, users[username])
            roster = Roster.objects.filter(team=team, league=league).first()
            if roster is None:
                roster = create_roster(
                    league=league,
                    team=team,
                    division=division,
                    name=team.name,
                    users=team.users.all(),
                )
                roster = approve_roster(roster)
            rosters.append(roster)

        home, away = rosters
        Match.objects.get_or_create(home_team=home, away_team=away, round_name="Week 1")

        self.stdout.write(self.style.SUCCESS("Demo users, teams and league ready."))
