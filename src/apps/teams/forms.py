from django import forms
from django.contrib.auth import get_user_model

from .models import Team


def add_validation_errors(form, exc) -> None:
    """Attach a service ``ValidationError`` to ``form``.

    Errors keyed by a field the form does not render become non-field errors.
    """
    if not hasattr(exc, "error_dict"):
        form.add_error(None, exc)
        return
    for field, errors in exc.error_dict.items():
        form.add_error(field if field in form.fields else None, errors)


class TeamForm(forms.ModelForm):
    class Meta:
        model = Team
        fields = ["name", "description", "notice"]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 4}),
            "notice": forms.Textarea(attrs={"rows": 3}),
        }


class InviteForm(forms.Form):
    username = forms.CharField(max_length=150)

    def clean_username(self):
        username = self.cleaned_data["username"].strip()
        User = get_user_model()
        try:
            return User.objects.get(username__iexact=username, is_active=True)
        except User.DoesNotExist as exc:
            raise forms.ValidationError("No active user with that username.") from exc
