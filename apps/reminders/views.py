from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    ReminderSerializer,
    ReminderCreateSerializer,
    ReminderUpdateSerializer,
    ReminderFilterSerializer,
    DueRemindersQuerySerializer,
)
from .permissions import IsReminderGroupAdmin
from .exceptions import InvalidReminderError, ReminderNotFoundError
from .services import (
    create_reminder,
    update_reminder,
    toggle_reminder,
    advance_reminder,
    delete_reminder,
    list_reminders,
    get_due_reminders,
)
from apps.groups.services import (
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
)


class ReminderPagination(PageNumberPagination):
    """Custom pagination for reminders."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(error):
    if isinstance(error, (GroupNotFoundError, ReminderNotFoundError)):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, (NotMemberError, InsufficientPermissionsError)):
        return Response({'error': str(error)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


SERVICE_ERRORS = (
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    ReminderNotFoundError,
    InvalidReminderError,
)


class RecurringReminderViewSet(viewsets.ModelViewSet):
    """
    ViewSet for recurring bill reminders.

    list: Reminders of the caller's groups, soonest first
    create: Create a reminder (group admin)
    retrieve: Get a specific reminder
    update: Update a reminder (group admin)
    destroy: Delete a reminder (group admin)
    toggle: Pause or resume a reminder (group admin)
    advance: Move the due date forward one period (group admin)
    due: Active reminders that are overdue or due soon
    """

    serializer_class = ReminderSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ReminderPagination

    def get_permissions(self):
        if self.action in ['update', 'partial_update', 'destroy', 'toggle', 'advance']:
            return [IsAuthenticated(), IsReminderGroupAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        if self.action != 'list':
            return list_reminders(user=self.request.user)

        filter_serializer = ReminderFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return list_reminders(
            user=self.request.user,
            group_id=params.get('group'),
            is_active=params.get('is_active')
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return ReminderCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return ReminderUpdateSerializer
        return ReminderSerializer

    @extend_schema(parameters=[ReminderFilterSerializer])
    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except (GroupNotFoundError, NotMemberError) as e:
            return _error_response(e)

    @extend_schema(request=ReminderCreateSerializer, responses={201: ReminderSerializer})
    def create(self, request, *args, **kwargs):
        """Create a reminder (group admin)."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            reminder = create_reminder(
                group_id=data['group'].id,
                user=request.user,
                title=data['title'],
                description=data.get('description', ''),
                amount=data['amount'],
                frequency=data['frequency'],
                next_due_date=data['next_due_date']
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(ReminderSerializer(reminder).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ReminderUpdateSerializer, responses={200: ReminderSerializer})
    def update(self, request, *args, **kwargs):
        """Update a reminder (group admin)."""
        reminder = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            reminder = update_reminder(
                reminder_id=reminder.id,
                user=request.user,
                **serializer.validated_data
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(ReminderSerializer(reminder).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a reminder (group admin)."""
        reminder = self.get_object()
        try:
            delete_reminder(reminder_id=reminder.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: ReminderSerializer})
    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """
        Pause or resume a reminder.

        POST /api/reminders/{id}/toggle/
        """
        reminder = self.get_object()
        try:
            reminder = toggle_reminder(reminder_id=reminder.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ReminderSerializer(reminder).data)

    @extend_schema(request=None, responses={200: ReminderSerializer})
    @action(detail=True, methods=['post'])
    def advance(self, request, pk=None):
        """
        Mark the current period as paid and roll the due date forward.

        POST /api/reminders/{id}/advance/
        """
        reminder = self.get_object()
        try:
            reminder = advance_reminder(reminder_id=reminder.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ReminderSerializer(reminder).data)

    @extend_schema(parameters=[DueRemindersQuerySerializer], responses={200: ReminderSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def due(self, request):
        """
        Active reminders that are overdue or due within ``days`` days.

        GET /api/reminders/due/?days=7&group={id}
        """
        query = DueRemindersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            reminders = get_due_reminders(
                user=request.user,
                days=query.validated_data.get('days'),
                group_id=query.validated_data.get('group')
            )
        except (GroupNotFoundError, NotMemberError) as e:
            return _error_response(e)

        return Response(ReminderSerializer(reminders, many=True).data)
