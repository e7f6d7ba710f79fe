# ==========================================
# apps/groups/admin.py
# ==========================================

from django.contrib import admin
from apps.groups.models import Group, GroupMembership, GroupInvite, InviteStatus


class GroupMembershipInline(admin.TabularInline):
    model = GroupMembership
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


class GroupInviteInline(admin.TabularInline):
    model = GroupInvite
    extra = 0
    fields = ['code', 'invited_by', 'status', 'expires_at', 'max_uses', 'used_count']
    readonly_fields = ['code', 'used_count']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = ['name', 'owner', 'member_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [GroupMembershipInline, GroupInviteInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def member_count(self, obj):
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Group Memberships."""

    list_display = ['user', 'group', 'role', 'joined_at']
    list_filter = ['role', 'joined_at']
    search_fields = ['user__email', 'group__name']
    readonly_fields = ['joined_at']
    ordering = ['-joined_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user', 'group')


@admin.register(GroupInvite)
class GroupInviteAdmin(admin.ModelAdmin):
    """Admin interface for invite links."""

    list_display = ['code', 'group', 'invited_by', 'status', 'used_count', 'max_uses', 'expires_at']
    list_filter = ['status', 'created_at']
    search_fields = ['code', 'group__name', 'invited_by__email']
    readonly_fields = ['code', 'used_count', 'created_at']

    actions = ['revoke_invites']

    def revoke_invites(self, request, queryset):
        updated = queryset.exclude(status=InviteStatus.REVOKED).update(status=InviteStatus.REVOKED)
        self.message_user(request, f"Revoked {updated} invites")
    revoke_invites.short_description = "Revoke selected invites"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('group', 'invited_by')
