from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from .models import League, Roster


def _roster_payload(roster: Roster) -> dict:
    return {
        "id": roster.pk,
        "name": roster.name,
        "description": roster.description,
        "team": {"id": roster.team_id, "name": roster.team.name},
        "league": {"id": roster.league_id, "name": roster.league.name},
        "division": {"id": roster.division_id, "name": roster.division.name},
        "state": roster.state,
        "approved": roster.approved,
        "disbanded": roster.disbanded,
        "ranking": roster.ranking,
        "seeding": roster.seeding,
        "players": [
            {"id": player.user_id, "username": player.user.get_username()}
            for player in roster.players.select_related("user").order_by("created_at", "id")
        ],
    }


@require_GET
def roster_show(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("team", "league", "division"), pk=pk)
    return JsonResponse({"roster": _roster_payload(roster)})


@require_GET
def roster_active(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league"), pk=pk)
    return JsonResponse(
        {"id": roster.pk, "active": roster.league.status == League.Status.RUNNING}
    )
