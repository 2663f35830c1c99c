from django.apps import AppConfig


class CashDrawerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cash_drawer"
    verbose_name = "Cash Drawer"
