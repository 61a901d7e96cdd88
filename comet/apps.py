from django.apps import AppConfig


class CometConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'comet'
    verbose_name = 'Basic Comet'

    def ready(self):
        from . import signals

        signals.connect_inbox_subscribers()
