"""
CI settings: production config against the CI Postgres service, minus the
HTTPS redirect so the test client's plain-HTTP requests reach the views.
Use via: DJANGO_SETTINGS_MODULE=config.settings.ci
"""
from .production import *  # noqa: F403

SECURE_SSL_REDIRECT = False

# The manifest storage needs collectstatic output, which CI never builds.
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}
