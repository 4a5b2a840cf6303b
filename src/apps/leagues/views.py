from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.db.models import Count, Prefetch
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django_ratelimit.decorators import ratelimit

from apps.accounts.permissions import (
    is_admin,
    user_can_destroy_roster,
    user_can_disband_roster,
    user_can_edit_league,
    user_can_edit_roster,
    user_can_edit_team,
    user_can_sign_up,
)
from apps.teams.forms import add_validation_errors
from apps.teams.models import Team
from .forms import RosterApproveForm, RosterEditForm, RosterSignupForm, TransferRequestForm
from .models import League, Roster, RosterTransferRequest
from .services import (
    approve_roster,
    create_roster,
    destroy_roster,
    disband_roster,
    undisband_roster,
    update_roster,
)
from .transfers import approve_transfer_request, create_transfer_request, deny_transfer_request


def _transfer_request_rate(*args, **kwargs):
    return settings.CITADEL_TRANSFER_REQUEST_RATE


def _error_text(exc: ValidationError) -> str:
    return " ".join(exc.messages)


def league_list(request):
    leagues = League.objects.all()
    if not (request.user.is_authenticated and is_admin(request.user)):
        leagues = leagues.exclude(status=League.Status.HIDDEN)
    paginator = Paginator(leagues, settings.CITADEL_PAGE_SIZE)
    page = paginator.get_page(request.GET.get("page"))
    return render(request, "leagues/league_list.html", {"page_obj": page})


def league_detail(request, pk: int):
    league = get_object_or_404(League, pk=pk)
    divisions = league.divisions.prefetch_related(
        Prefetch(
            "rosters",
            queryset=Roster.objects.filter(approved=True).select_related("team"),
            to_attr="approved_rosters",
        )
    )
    return render(
        request,
        "leagues/league_detail.html",
        {
            "league": league,
            "divisions": divisions,
            "can_edit_league": user_can_edit_league(request.user, league),
            "can_sign_up": user_can_sign_up(request.user, league),
        },
    )


@login_required
def roster_list(request, pk: int):
    league = get_object_or_404(League, pk=pk)
    if not user_can_edit_league(request.user, league):
        return redirect(league)
    divisions = league.divisions.prefetch_related(
        Prefetch(
            "rosters",
            queryset=Roster.objects.select_related("team").annotate(
                num_players=Count("players")
            ),
        )
    )
    template = "leagues/_roster_rows.html" if request.htmx else "leagues/roster_list.html"
    return render(request, template, {"league": league, "divisions": divisions})


@login_required
def roster_signup(request, pk: int):
    league = get_object_or_404(League, pk=pk)
    if not user_can_sign_up(request.user, league):
        return redirect(league)

    team_id = request.POST.get("team_id") or request.GET.get("team_id")
    if not team_id:
        teams = (
            Team.objects.filter(captains=request.user)
            .exclude(rosters__league=league)
            .order_by("name")
        )
        return render(request, "leagues/roster_pick_team.html", {"league": league, "teams": teams})

    team = get_object_or_404(Team, pk=team_id)
    if not user_can_edit_team(request.user, team):
        return redirect(league)

    if request.method == "POST":
        form = RosterSignupForm(request.POST, league=league, team=team)
        if form.is_valid():
            try:
                create_roster(
                    league=league,
                    team=team,
                    division=form.cleaned_data["division"],
                    name=form.cleaned_data["name"],
                    description=form.cleaned_data["description"],
                    users=form.cleaned_data["players"],
                )
            except ValidationError as exc:
                add_validation_errors(form, exc)
            else:
                messages.success(request, "Signed up. Your roster is pending approval.")
                return redirect(team)
    else:
        form = RosterSignupForm(league=league, team=team)

    return render(
        request, "leagues/roster_signup.html", {"league": league, "team": team, "form": form}
    )


def _edit_context(request, roster, form=None, transfer_form=None):
    can_edit_league = user_can_edit_league(request.user, roster.league)
    return {
        "roster": roster,
        "league": roster.league,
        "can_edit_league": can_edit_league,
        "form": form or RosterEditForm(roster=roster, can_edit_league=can_edit_league),
        "transfer_form": transfer_form
        or TransferRequestForm(roster=roster, can_edit_league=can_edit_league),
        "players": roster.players.select_related("user"),
        "users_off_roster": roster.users_off_roster(),
        "pending_requests": roster.transfer_requests.filter(
            approved_by__isnull=True
        ).select_related("user", "created_by"),
        "transfers": roster.transfers.select_related("user").order_by("-created_at")[:50],
    }


@login_required
def roster_edit(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_edit_roster(request.user, roster):
        return redirect(roster.team)

    form = None
    if request.method == "POST":
        form = RosterEditForm(
            request.POST,
            roster=roster,
            can_edit_league=user_can_edit_league(request.user, roster.league),
        )
        if form.is_valid():
            try:
                update_roster(roster, **form.cleaned_data)
            except ValidationError as exc:
                add_validation_errors(form, exc)
            else:
                messages.success(request, "Roster updated.")
                return redirect(roster.team)

    return render(request, "leagues/roster_edit.html", _edit_context(request, roster, form=form))


@login_required
def roster_review(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_edit_league(request.user, roster.league):
        return redirect(roster.league)
    if roster.approved:
        return redirect("leagues:roster_list", pk=roster.league_id)

    if request.method == "POST":
        form = RosterApproveForm(request.POST, roster=roster)
        if form.is_valid():
            try:
                approve_roster(roster, **form.cleaned_data)
            except ValidationError as exc:
                add_validation_errors(form, exc)
            else:
                messages.success(request, f"{roster.name} approved.")
                return redirect("leagues:roster_list", pk=roster.league_id)
    else:
        form = RosterApproveForm(roster=roster)

    return render(request, "leagues/roster_review.html", {"roster": roster, "form": form})


@login_required
@require_POST
def roster_disband(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_disband_roster(request.user, roster):
        return redirect(roster.team)
    if disband_roster(roster):
        messages.success(request, f"{roster.name} has been disbanded.")
        return redirect(roster.team)
    messages.error(request, "Roster could not be disbanded.")
    return redirect("leagues:roster_edit", pk=roster.pk)


@login_required
@require_POST
def roster_undisband(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_edit_league(request.user, roster.league):
        return redirect(roster.team)
    if undisband_roster(roster):
        messages.success(request, f"{roster.name} is no longer disbanded.")
        return redirect(roster.team)
    messages.error(request, "Roster is not disbanded.")
    return redirect("leagues:roster_edit", pk=roster.pk)


@login_required
@require_POST
def roster_destroy(request, pk: int):
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_destroy_roster(request.user, roster):
        return redirect(roster.team)
    league = roster.league
    if destroy_roster(roster):
        messages.success(request, "Roster deleted.")
        return redirect(league)
    messages.error(request, "Disbanded rosters cannot be deleted.")
    return redirect("leagues:roster_edit", pk=roster.pk)


@ratelimit(key="user_or_ip", rate=_transfer_request_rate, block=False)
@login_required
@require_POST
def transfer_request_create(request, pk: int):
    if getattr(request, "limited", False):
        return HttpResponse("Rate limit exceeded. Please wait and try again.", status=429)
    roster = get_object_or_404(Roster.objects.select_related("league", "team"), pk=pk)
    if not user_can_edit_roster(request.user, roster):
        return HttpResponseForbidden("You cannot transfer players on this roster")

    can_edit_league = user_can_edit_league(request.user, roster.league)
    form = TransferRequestForm(request.POST, roster=roster, can_edit_league=can_edit_league)
    if form.is_valid():
        try:
            transfer_request = create_transfer_request(
                roster=roster,
                user=form.cleaned_data["user"],
                is_joining=form.is_joining,
                propagate=form.cleaned_data.get("propagate", False),
                created_by=request.user,
            )
        except ValidationError as exc:
            add_validation_errors(form, exc)
        else:
            if transfer_request.is_pending:
                messages.success(request, "Transfer requested. Waiting for league approval.")
            else:
                messages.success(request, "Transfer completed.")
            return redirect("leagues:roster_edit", pk=roster.pk)

    return render(
        request,
        "leagues/roster_edit.html",
        _edit_context(request, roster, transfer_form=form),
        status=400,
    )


@login_required
def transfer_request_list(request, pk: int):
    league = get_object_or_404(League, pk=pk)
    if not user_can_edit_league(request.user, league):
        return redirect(league)
    pending = (
        RosterTransferRequest.objects.filter(roster__league=league, approved_by__isnull=True)
        .select_related("roster", "user", "created_by")
        .order_by("created_at")
    )
    return render(
        request,
        "leagues/transfer_request_list.html",
        {"league": league, "pending_requests": pending},
    )


def _league_transfer_request(request, pk: int):
    transfer_request = get_object_or_404(
        RosterTransferRequest.objects.select_related("roster__league"), pk=pk
    )
    if not user_can_edit_league(request.user, transfer_request.roster.league):
        return transfer_request, False
    return transfer_request, True


@login_required
@require_POST
def transfer_request_approve(request, pk: int):
    transfer_request, allowed = _league_transfer_request(request, pk)
    league_id = transfer_request.roster.league_id
    if not allowed:
        return HttpResponseForbidden("League admin access required")
    try:
        approve_transfer_request(transfer_request, approved_by=request.user)
        messages.success(request, "Transfer approved.")
    except ValidationError as exc:
        messages.error(request, _error_text(exc))
    return redirect("leagues:transfer_request_list", pk=league_id)


@login_required
@require_POST
def transfer_request_deny(request, pk: int):
    transfer_request, allowed = _league_transfer_request(request, pk)
    league_id = transfer_request.roster.league_id
    if not allowed:
        return HttpResponseForbidden("League admin access required")
    try:
        deny_transfer_request(transfer_request)
        messages.success(request, "Transfer denied.")
    except ValidationError as exc:
        messages.error(request, _error_text(exc))
    return redirect("leagues:transfer_request_list", pk=league_id)
