from django.apps import AppConfig


class SettlementCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tipgame.settlement_core'
    verbose_name = 'Settlement Core Logic'
