from django.apps import AppConfig


class PredictionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tipgame.predictions'
    verbose_name = 'Predictions'

    def ready(self):
        from tipgame.predictions import signals  # noqa: F401
