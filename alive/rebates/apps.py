from django.apps import AppConfig


class RebatesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'alive.rebates'
    label = 'rebates'
