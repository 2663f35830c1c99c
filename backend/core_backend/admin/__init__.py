"""
Admin utilities for the core_backend app.
"""

from .mixins import (
    TenantAdminMixin,
    ArchivingAdminMixin,
)

__all__ = [
    'TenantAdminMixin',
    'ArchivingAdminMixin',
]
