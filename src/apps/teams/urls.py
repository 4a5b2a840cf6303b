from django.urls import path

from . import views

app_name = "teams"

urlpatterns = [
    path("", views.team_list, name="list"),
    path("new/", views.team_create, name="create"),
    path("<int:pk>/", views.team_detail, name="detail"),
    path("<int:pk>/edit/", views.team_edit, name="edit"),
    path("<int:pk>/invite/", views.team_invite, name="invite"),
    path("<int:pk>/players/<int:user_id>/remove/", views.player_remove, name="player_remove"),
    path("<int:pk>/destroy/", views.team_destroy, name="destroy"),
    path("invites/<int:pk>/accept/", views.invite_accept, name="invite_accept"),
    path("invites/<int:pk>/decline/", views.invite_decline, name="invite_decline"),
]
