from django.apps import AppConfig


class HousemeetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "housemeet"
    verbose_name = "House Meet"
