from django.contrib import admin

from .models import (
    Division,
    League,
    Match,
    Roster,
    RosterPlayer,
    RosterTransfer,
    RosterTransferRequest,
)


class DivisionInline(admin.TabularInline):
    model = Division
    extra = 0


@admin.register(League)
class LeagueAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "status",
        "signuppable",
        "min_players",
        "max_players",
        "transfers_require_approval",
    )
    list_filter = ("status", "signuppable", "allow_disbanding")
    search_fields = ("name",)
    filter_horizontal = ("admins",)
    inlines = [DivisionInline]


@admin.register(Division)
class DivisionAdmin(admin.ModelAdmin):
    list_display = ("name", "league")
    list_filter = ("league",)
    search_fields = ("name", "league__name")


class RosterPlayerInline(admin.TabularInline):
    model = RosterPlayer
    extra = 0
    readonly_fields = ("created_at",)


class RosterTransferInline(admin.TabularInline):
    model = RosterTransfer
    extra = 0
    readonly_fields = ("user", "is_joining", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Roster)
class RosterAdmin(admin.ModelAdmin):
    list_display = ("name", "team", "league", "division", "approved", "disbanded", "seeding")
    list_filter = ("league", "approved", "disbanded")
    search_fields = ("name", "team__name")
    readonly_fields = ("league", "created_at", "updated_at")
    inlines = [RosterPlayerInline, RosterTransferInline]


@admin.register(RosterTransferRequest)
class RosterTransferRequestAdmin(admin.ModelAdmin):
    list_display = ("roster", "user", "is_joining", "propagate", "created_by", "approved_by", "created_at")
    list_filter = ("is_joining", "roster__league")
    search_fields = ("user__username", "roster__name")


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ("home_team", "away_team", "round_name", "status", "forfeit_by", "created_at")
    list_filter = ("status", "forfeit_by", "home_team__league")
    search_fields = ("home_team__name", "away_team__name")
