from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Group
from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    GroupInviteSerializer,
    InviteCreateSerializer,
    InviteDetailSerializer,
    UpdateMemberRoleSerializer,
    RemoveMemberSerializer,
)
from .permissions import IsGroupAdmin, IsGroupOwner

from apps.groups.services import (
    create_group,
    update_group,
    delete_group,
    leave_group,
    remove_member,
    get_group_members,
    update_member_role,
    create_invite,
    get_invite,
    accept_invite,
    revoke_invite,
    list_group_invites,
    # Exceptions
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    CannotChangeOwnerRoleError,
    InsufficientPermissionsError,
    InviteNotFoundError,
    InviteExpiredError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of)
    create: Create a new group
    retrieve: Get a specific group
    update: Update a group (admin only)
    partial_update: Partially update a group (admin only)
    destroy: Delete a group (owner only)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination

    def get_queryset(self):
        """Return only groups where user is a member."""
        return Group.objects.filter(
            memberships__user=self.request.user
        ).select_related('owner').prefetch_related('memberships').distinct()

    def get_serializer_class(self):
        if self.action == 'list':
            return GroupListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return GroupCreateSerializer
        return GroupSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['update', 'partial_update', 'update_member_role', 'remove_member']:
            return [IsAuthenticated(), IsGroupAdmin()]
        if self.action == 'destroy':
            return [IsAuthenticated(), IsGroupOwner()]
        return [IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = create_group(
            name=serializer.validated_data['name'],
            owner=request.user,
            description=serializer.validated_data.get('description', '')
        )

        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update group name or description (admin only)."""
        group = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(group, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            group = update_group(
                group_id=group.id,
                user=request.user,
                name=serializer.validated_data.get('name'),
                description=serializer.validated_data.get('description')
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(GroupSerializer(group, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a group (owner only)."""
        group = self.get_object()
        try:
            delete_group(group_id=group.id, user=request.user)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the group."""
        group = self.get_object()
        memberships = get_group_members(group_id=group.id)
        serializer = GroupMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group."""
        group = self.get_object()
        try:
            leave_group(group_id=group.id, user=request.user)
        except (OwnerCannotLeaveError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def update_member_role(self, request, pk=None):
        """Update member's role (admin only)."""
        group = self.get_object()
        serializer = UpdateMemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = update_member_role(
                group_id=group.id,
                user_id=serializer.validated_data['user_id'],
                new_role=serializer.validated_data['role'],
                updated_by=request.user
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (NotMemberError, CannotChangeOwnerRoleError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(GroupMemberSerializer(membership).data)

    @action(detail=True, methods=['delete'])
    def remove_member(self, request, pk=None):
        """Remove a member from the group (admin only)."""
        group = self.get_object()
        serializer = RemoveMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_member(
                group_id=group.id,
                user_id=serializer.validated_data['user_id'],
                removed_by=request.user
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (CannotRemoveOwnerError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=InviteCreateSerializer, responses={200: GroupInviteSerializer(many=True), 201: GroupInviteSerializer})
    @action(detail=True, methods=['get', 'post'])
    def invites(self, request, pk=None):
        """List the group's invites or create a new one (any member)."""
        group = self.get_object()

        if request.method == 'GET':
            invites = list_group_invites(group_id=group.id, user=request.user)
            return Response(GroupInviteSerializer(invites, many=True).data)

        serializer = InviteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invite = create_invite(
            group_id=group.id,
            user=request.user,
            expires_in_days=serializer.validated_data.get('expires_in_days'),
            max_uses=serializer.validated_data.get('max_uses')
        )
        return Response(GroupInviteSerializer(invite).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Invite links
# =============================================================================

@extend_schema(
    responses={200: InviteDetailSerializer},
    description="Public invite lookup. Returns 410 when the invite can no longer be used.",
    tags=['invites'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def invite_detail(request, code):
    """Get invite info before joining."""
    try:
        invite, already_member = get_invite(code=code, user=request.user)
    except InviteNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InviteExpiredError as e:
        return Response({'error': str(e)}, status=status.HTTP_410_GONE)

    serializer = InviteDetailSerializer(invite, context={'already_member': already_member})
    return Response(serializer.data)


@extend_schema(
    request=None,
    responses={200: GroupMemberSerializer},
    description="Join the invite's group.",
    tags=['invites'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invite_accept(request, code):
    """Accept an invite and join the group."""
    try:
        membership = accept_invite(code=code, user=request.user)
    except InviteNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InviteExpiredError as e:
        return Response({'error': str(e)}, status=status.HTTP_410_GONE)
    except AlreadyMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Successfully joined group',
        'group': str(membership.group_id),
        'membership': GroupMemberSerializer(membership).data,
    })


@extend_schema(
    request=None,
    responses={200: GroupInviteSerializer},
    description="Revoke an invite (invite creator or group admin).",
    tags=['invites'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invite_revoke(request, code):
    """Revoke an invite."""
    try:
        invite = revoke_invite(code=code, user=request.user)
    except InviteNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InsufficientPermissionsError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(GroupInviteSerializer(invite).data)
