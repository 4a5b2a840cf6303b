from django.contrib import admin

from .models import Team, TeamInvite, TeamPlayer, TeamTransfer


class TeamPlayerInline(admin.TabularInline):
    model = TeamPlayer
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at", "updated_at")
    search_fields = ("name",)
    filter_horizontal = ("captains",)
    inlines = [TeamPlayerInline]


@admin.register(TeamTransfer)
class TeamTransferAdmin(admin.ModelAdmin):
    list_display = ("team", "user", "is_joining", "created_at")
    list_filter = ("is_joining",)
    search_fields = ("team__name", "user__username")
    readonly_fields = ("team", "user", "is_joining", "created_at")


@admin.register(TeamInvite)
class TeamInviteAdmin(admin.ModelAdmin):
    list_display = ("team", "user", "created_at")
    search_fields = ("team__name", "user__username")
