# testrequests/apps.py

from django.apps import AppConfig


class TestRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "testrequests"
    verbose_name = "Test requests"
