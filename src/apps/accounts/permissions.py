"""
Authorization predicates. Views evaluate these before calling into the
roster or team services; the services themselves never look at roles.
"""
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db.models import Q

ADMIN_GROUP = "admin"


def has_group(user, name: str) -> bool:
    return user.is_authenticated and user.groups.filter(name=name).exists()


def is_admin(user) -> bool:
    return has_group(user, ADMIN_GROUP) or user.is_superuser


def ensure_group(name: str) -> Group:
    group, _ = Group.objects.get_or_create(name=name)
    return group


def user_can_edit_league(user, league) -> bool:
    if not user.is_authenticated:
        return False
    return is_admin(user) or league.admins.filter(pk=user.pk).exists()


def user_can_edit_team(user, team) -> bool:
    if not user.is_authenticated:
        return False
    return is_admin(user) or team.captains.filter(pk=user.pk).exists()


def user_can_sign_up(user, league) -> bool:
    return user.is_authenticated and league.signuppable


def user_can_edit_roster(user, roster) -> bool:
    return user_can_edit_team(user, roster.team) or user_can_edit_league(user, roster.league)


def user_can_disband_roster(user, roster) -> bool:
    if roster.disbanded:
        return False
    if user_can_edit_league(user, roster.league):
        return True
    return roster.league.allow_disbanding and user_can_edit_team(user, roster.team)


def user_can_destroy_roster(user, roster) -> bool:
    if user_can_edit_league(user, roster.league):
        return True
    return user_can_edit_team(user, roster.team) and not roster.has_confirmed_matches()


def users_who_can_edit_team(team):
    return (
        get_user_model()
        .objects.filter(
            Q(captained_teams=team) | Q(groups__name=ADMIN_GROUP) | Q(is_superuser=True),
            is_active=True,
        )
        .distinct()
    )
