from django.urls import path

from . import api

app_name = "api"

urlpatterns = [
    path("rosters/<int:pk>/", api.roster_show, name="roster_show"),
    path("rosters/<int:pk>/active/", api.roster_active, name="roster_active"),
]
