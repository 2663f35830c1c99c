"""
Signal handlers for the settings app.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver

from tenant.models import Tenant


@receiver(post_save, sender=Tenant)
def create_settings_for_tenant(sender, instance, created, **kwargs):
    """
    Give every new tenant a zeroed settings row so rate lookups never miss.
    """
    if created:
        from settings.services import SettingsService
        SettingsService.get_settings(instance)
