from rest_framework import serializers
from .models import Group, GroupMembership, GroupInvite, GroupRole
from apps.accounts.serializers import UserMinimalSerializer


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'owner',
            'member_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'owner', 'created_at', 'updated_at']

    def get_member_count(self, obj):
        return obj.memberships.count()

    def get_user_role(self, obj):
        """Current user's role in the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.get_user_role(request.user)
        return None


class GroupCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating groups."""

    class Meta:
        model = Group
        fields = ['name', 'description']


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'owner',
            'member_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.memberships.count()


class GroupMemberSerializer(serializers.ModelSerializer):
    """Detailed member information."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'role', 'joined_at']
        read_only_fields = fields


class UpdateMemberRoleSerializer(serializers.Serializer):
    """Serializer for updating member role."""

    user_id = serializers.UUIDField(required=True)
    role = serializers.ChoiceField(
        choices=[GroupRole.ADMIN, GroupRole.MEMBER],
        required=True
    )


class RemoveMemberSerializer(serializers.Serializer):

    user_id = serializers.UUIDField(required=True)


class GroupInviteSerializer(serializers.ModelSerializer):
    """Invite as shown to group members."""

    invited_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupInvite
        fields = [
            'id',
            'code',
            'group',
            'invited_by',
            'status',
            'expires_at',
            'max_uses',
            'used_count',
            'created_at',
        ]
        read_only_fields = fields


class InviteCreateSerializer(serializers.Serializer):
    """Options for a new invite."""

    expires_in_days = serializers.IntegerField(required=False, min_value=1, allow_null=True)
    max_uses = serializers.IntegerField(required=False, min_value=1, allow_null=True)


class InviteGroupSerializer(serializers.ModelSerializer):
    """Public group preview on the invite page."""

    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = ['id', 'name', 'description', 'member_count']
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.memberships.count()


class InviteDetailSerializer(serializers.ModelSerializer):
    """Invite info returned by the public lookup endpoint."""

    group = InviteGroupSerializer(read_only=True)
    invited_by = UserMinimalSerializer(read_only=True)
    already_member = serializers.SerializerMethodField()

    class Meta:
        model = GroupInvite
        fields = [
            'code',
            'group',
            'invited_by',
            'status',
            'expires_at',
            'max_uses',
            'used_count',
            'already_member',
        ]
        read_only_fields = fields

    def get_already_member(self, obj):
        return self.context.get('already_member', False)
