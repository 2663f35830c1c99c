"""
Admin mixins for tenant-owned and archivable models.
"""

from django.contrib import admin, messages


class TenantAdminMixin:
    """
    The admin runs without tenant context (TenantMiddleware skips /admin/),
    so the tenant-filtering default manager would show nothing. Query through
    ``all_objects`` and let staff filter by tenant instead.
    """

    def get_queryset(self, request):
        manager = getattr(self.model, 'all_objects', self.model._default_manager)
        queryset = manager.all()

        ordering = self.get_ordering(request)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return queryset

    def get_list_filter(self, request):
        list_filter = list(super().get_list_filter(request))
        if 'tenant' not in list_filter:
            list_filter.insert(0, 'tenant')
        return list_filter


class ArchivingAdminMixin:
    """
    Replaces the delete action with archive/unarchive actions for models
    using SoftDeleteMixin.
    """

    actions = ['archive_selected', 'unarchive_selected']

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    @admin.action(description='Archive selected items')
    def archive_selected(self, request, queryset):
        count = queryset.filter(is_active=True).archive(archived_by=request.user)
        if count == 0:
            self.message_user(request, "No active records selected.", level=messages.WARNING)
            return
        self.message_user(
            request,
            f"Successfully archived {count} {queryset.model._meta.verbose_name_plural}.",
            level=messages.SUCCESS
        )

    @admin.action(description='Unarchive selected items')
    def unarchive_selected(self, request, queryset):
        count = queryset.filter(is_active=False).unarchive()
        if count == 0:
            self.message_user(request, "No archived records selected.", level=messages.WARNING)
            return
        self.message_user(
            request,
            f"Successfully unarchived {count} {queryset.model._meta.verbose_name_plural}.",
            level=messages.SUCCESS
        )
