from django.apps import AppConfig


class TrainingPayConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "training_pay"
    verbose_name = "Training Pay (Ledger • Transport • Settlement • Commuting)"

    def ready(self):
        import training_pay.signals  # noqa
