from django import forms
from django.contrib.auth import get_user_model

from .models import Division


class RosterSignupForm(forms.Form):
    name = forms.CharField(max_length=64)
    description = forms.CharField(
        required=False, max_length=1000, widget=forms.Textarea(attrs={"rows": 4})
    )
    division = forms.ModelChoiceField(queryset=Division.objects.none())
    players = forms.ModelMultipleChoiceField(
        queryset=get_user_model().objects.none(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    def __init__(self, *args, league, team, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["division"].queryset = league.divisions.all()
        self.fields["players"].queryset = team.users.all()
        self.initial.setdefault("name", team.name)
        self.initial.setdefault("division", league.divisions.first())
        self.initial.setdefault("players", list(team.users.all()))


class RosterApproveForm(forms.Form):
    name = forms.CharField(max_length=64)
    division = forms.ModelChoiceField(queryset=Division.objects.none())
    seeding = forms.IntegerField(min_value=1, required=False)

    def __init__(self, *args, roster, **kwargs):
        kwargs.setdefault(
            "initial",
            {"name": roster.name, "division": roster.division, "seeding": roster.seeding},
        )
        super().__init__(*args, **kwargs)
        self.fields["division"].queryset = roster.league.divisions.all()


class RosterEditForm(forms.Form):
    """League admins edit every field; captains only the description."""

    CAPTAIN_FIELDS = ("description",)

    name = forms.CharField(max_length=64)
    description = forms.CharField(
        required=False, max_length=1000, widget=forms.Textarea(attrs={"rows": 4})
    )
    notice = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 3}))
    ranking = forms.IntegerField(min_value=1, required=False)
    seeding = forms.IntegerField(min_value=1, required=False)
    division = forms.ModelChoiceField(queryset=Division.objects.none())

    def __init__(self, *args, roster, can_edit_league=False, **kwargs):
        kwargs.setdefault(
            "initial",
            {
                "name": roster.name,
                "description": roster.description,
                "notice": roster.notice,
                "ranking": roster.ranking,
                "seeding": roster.seeding,
                "division": roster.division,
            },
        )
        super().__init__(*args, **kwargs)
        self.fields["division"].queryset = roster.league.divisions.all()
        if not can_edit_league:
            for name in list(self.fields):
                if name not in self.CAPTAIN_FIELDS:
                    del self.fields[name]


class TransferRequestForm(forms.Form):
    DIRECTION_CHOICES = [("in", "Transfer in"), ("out", "Transfer out")]

    user = forms.ModelChoiceField(queryset=get_user_model().objects.none())
    direction = forms.ChoiceField(choices=DIRECTION_CHOICES)
    propagate = forms.BooleanField(
        required=False,
        help_text="Also add the player to, or remove them from, the team.",
    )

    def __init__(self, *args, roster, can_edit_league=False, **kwargs):
        super().__init__(*args, **kwargs)
        if can_edit_league:
            self.fields["user"].queryset = get_user_model().objects.filter(is_active=True)
        else:
            self.fields["user"].queryset = roster.team.users.all()
            del self.fields["propagate"]

    @property
    def is_joining(self) -> bool:
        return self.cleaned_data["direction"] == "in"
