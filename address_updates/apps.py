from django.apps import AppConfig


class AddressUpdatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "address_updates"
    verbose_name = "Address update requests"
