from django.contrib import admin
from django.urls import include, path

from apps.leagues.views import league_list

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", league_list, name="home"),
    path("leagues/", include("apps.leagues.urls")),
    path("teams/", include("apps.teams.urls")),
    path("notifications/", include("apps.notifications.urls")),
    path("api/v1/", include("apps.leagues.api_urls")),
]
