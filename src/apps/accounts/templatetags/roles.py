from django import template

from apps.accounts.permissions import (
    user_can_destroy_roster,
    user_can_disband_roster,
    user_can_edit_league,
    user_can_edit_roster,
    user_can_edit_team,
)

register = template.Library()


@register.filter
def can_edit_league(user, league):
    return user_can_edit_league(user, league)


@register.filter
def can_edit_team(user, team):
    return user_can_edit_team(user, team)


@register.filter
def can_edit_roster(user, roster):
    return user_can_edit_roster(user, roster)


@register.filter
def can_disband_roster(user, roster):
    return user_can_disband_roster(user, roster)


@register.filter
def can_destroy_roster(user, roster):
    return user_can_destroy_roster(user, roster)
