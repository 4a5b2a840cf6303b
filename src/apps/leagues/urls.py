from django.urls import path

from . import views

app_name = "leagues"

urlpatterns = [
    path("", views.league_list, name="list"),
    path("<int:pk>/", views.league_detail, name="detail"),
    path("<int:pk>/rosters/", views.roster_list, name="roster_list"),
    path("<int:pk>/signup/", views.roster_signup, name="roster_signup"),
    path("<int:pk>/transfers/", views.transfer_request_list, name="transfer_request_list"),
    path("rosters/<int:pk>/", views.roster_edit, name="roster_edit"),
    path("rosters/<int:pk>/review/", views.roster_review, name="roster_review"),
    path("rosters/<int:pk>/disband/", views.roster_disband, name="roster_disband"),
    path("rosters/<int:pk>/undisband/", views.roster_undisband, name="roster_undisband"),
    path("rosters/<int:pk>/destroy/", views.roster_destroy, name="roster_destroy"),
    path("rosters/<int:pk>/transfers/", views.transfer_request_create, name="transfer_request_create"),
    path("transfers/<int:pk>/approve/", views.transfer_request_approve, name="transfer_request_approve"),
    path("transfers/<int:pk>/deny/", views.transfer_request_deny, name="transfer_request_deny"),
]
