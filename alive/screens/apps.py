from django.apps import AppConfig


class ScreensConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'alive.screens'
    label = 'screens'
    verbose_name = 'Ad Screens'
