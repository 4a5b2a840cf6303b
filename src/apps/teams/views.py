from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.paginator import Paginator
from django.http import HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from apps.accounts.permissions import user_can_edit_team
from .forms import InviteForm, TeamForm, add_validation_errors
from .models import Team, TeamInvite
from .services import (
    accept_invite,
    create_team,
    decline_invite,
    destroy_team,
    invite_user,
    remove_player,
)


def team_list(request):
    teams = Team.objects.all()
    query = request.GET.get("q", "").strip()
    if query:
        teams = teams.filter(name__icontains=query)
    paginator = Paginator(teams, settings.CITADEL_PAGE_SIZE)
    page = paginator.get_page(request.GET.get("page"))
    return render(request, "teams/team_list.html", {"page_obj": page, "query": query})


def team_detail(request, pk: int):
    team = get_object_or_404(Team, pk=pk)
    can_edit = user_can_edit_team(request.user, team)
    context = {
        "team": team,
        "can_edit": can_edit,
        "players": team.players.select_related("user").order_by("created_at", "id"),
        "captain_ids": set(team.captains.values_list("pk", flat=True)),
        "rosters": team.rosters.select_related("league", "division"),
        "transfers": team.transfers.select_related("user").order_by("-created_at")[:50],
        "invite_form": InviteForm() if can_edit else None,
        "invites": team.invites.select_related("user") if can_edit else [],
        "my_invite": None,
    }
    if request.user.is_authenticated:
        context["my_invite"] = team.invites.filter(user=request.user).first()
    return render(request, "teams/team_detail.html", context)


@login_required
def team_create(request):
    if request.method == "POST":
        form = TeamForm(request.POST)
        if form.is_valid():
            try:
                team = create_team(captain=request.user, **form.cleaned_data)
            except ValidationError as exc:
                add_validation_errors(form, exc)
            else:
                messages.success(request, f"{team.name} created.")
                return redirect(team)
    else:
        form = TeamForm()
    return render(request, "teams/team_form.html", {"form": form})


@login_required
def team_edit(request, pk: int):
    team = get_object_or_404(Team, pk=pk)
    if not user_can_edit_team(request.user, team):
        return redirect(team)
    if request.method == "POST":
        form = TeamForm(request.POST, instance=team)
        if form.is_valid():
            form.save()
            messages.success(request, "Team updated.")
            return redirect(team)
    else:
        form = TeamForm(instance=team)
    return render(request, "teams/team_form.html", {"form": form, "team": team})


@login_required
@require_POST
def team_invite(request, pk: int):
    team = get_object_or_404(Team, pk=pk)
    if not user_can_edit_team(request.user, team):
        return HttpResponseForbidden("Only team captains can invite players")
    form = InviteForm(request.POST)
    if form.is_valid():
        try:
            invite_user(team, form.cleaned_data["username"])
        except ValidationError as exc:
            messages.error(request, " ".join(exc.messages))
        else:
            messages.success(request, "Invite sent.")
    else:
        messages.error(request, " ".join(form.errors.get("username", [])))
    return redirect(team)


@login_required
@require_POST
def invite_accept(request, pk: int):
    invite = get_object_or_404(TeamInvite.objects.select_related("team"), pk=pk)
    team = invite.team
    try:
        accept_invite(invite, request.user)
    except PermissionDenied:
        return HttpResponseForbidden("This invite belongs to another user")
    except ValidationError as exc:
        messages.error(request, " ".join(exc.messages))
    else:
        messages.success(request, f"You joined {team.name}.")
    return redirect(team)


@login_required
@require_POST
def invite_decline(request, pk: int):
    invite = get_object_or_404(TeamInvite.objects.select_related("team"), pk=pk)
    team = invite.team
    try:
        decline_invite(invite, request.user)
    except PermissionDenied:
        return HttpResponseForbidden("This invite belongs to another user")
    messages.info(request, "Invite declined.")
    return redirect(team)


@login_required
@require_POST
def player_remove(request, pk: int, user_id: int):
    team = get_object_or_404(Team, pk=pk)
    user = get_object_or_404(get_user_model(), pk=user_id)
    # Players may always leave; only captains remove others.
    if user != request.user and not user_can_edit_team(request.user, team):
        return HttpResponseForbidden("Only team captains can remove players")
    try:
        remove_player(team, user)
    except ValidationError as exc:
        messages.error(request, " ".join(exc.messages))
    else:
        if user == request.user:
            messages.success(request, f"You left {team.name}.")
        else:
            messages.success(request, f"{user.get_username()} removed from {team.name}.")
    return redirect(team)


@login_required
@require_POST
def team_destroy(request, pk: int):
    team = get_object_or_404(Team, pk=pk)
    if not user_can_edit_team(request.user, team):
        return HttpResponseForbidden("Only team captains can delete the team")
    name = team.name
    if destroy_team(team):
        messages.success(request, f"{name} deleted.")
        return redirect("teams:list")
    messages.error(request, "Teams with active rosters cannot be deleted. Disband them first.")
    return redirect(team)
