from django.apps import AppConfig


class KiranaConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'alive.kirana'
    label = 'kirana'
