from django.apps import AppConfig


class DiscipleshipConfig(AppConfig):
    name = "discipleship"
    verbose_name = "Discipulado"
