from django.apps import AppConfig


class AsksConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.asks'
    verbose_name = 'ASK sessions'
