from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import ExpenseCategory
from .serializers import (
    ExpenseSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseFilterSerializer,
    SpendingSummaryQuerySerializer,
    SpendingSummarySerializer,
)
from .permissions import CanManageExpense
from .exceptions import (
    ExpenseNotFoundError,
    ExpensePermissionError,
    InvalidExpenseError,
)
from .services import (
    create_expense,
    update_expense,
    delete_expense,
    list_expenses,
    get_spending_summary,
    SpendingPeriod,
)
from apps.groups.services import GroupNotFoundError, NotMemberError


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ExpenseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Expense CRUD operations.

    list: Expenses of the caller's groups (filterable by group/category/date)
    create: Log an expense in a group
    retrieve: Get a specific expense
    update: Update an expense (payer or group admin)
    destroy: Delete an expense (payer or group admin)
    summary: Per-member spending for a group and period
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination

    def get_permissions(self):
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), CanManageExpense()]
        return super().get_permissions()

    def get_queryset(self):
        """Filter expenses using input serializer validation."""
        if self.action != 'list':
            return list_expenses(user=self.request.user)

        filter_serializer = ExpenseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = list_expenses(user=self.request.user, group_id=params.get('group'))

        if 'category' in params:
            queryset = queryset.filter(category=params['category'])
        if 'date_from' in params:
            queryset = queryset.filter(date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(date__lte=params['date_to'])

        return queryset

    def get_serializer_class(self):
        if self.action == 'create':
            return ExpenseCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return ExpenseUpdateSerializer
        return ExpenseSerializer

    @extend_schema(parameters=[ExpenseFilterSerializer])
    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    @extend_schema(request=ExpenseCreateSerializer, responses={201: ExpenseSerializer})
    def create(self, request, *args, **kwargs):
        """Log a new expense."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = create_expense(
                group_id=data['group'].id,
                user=request.user,
                amount=data['amount'],
                description=data['description'],
                date=data['date'],
                category=data.get('category', ExpenseCategory.OTHER),
                paid_by=data.get('paid_by')
            )
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidExpenseError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: ExpenseSerializer})
    def update(self, request, *args, **kwargs):
        """Update an expense (payer or group admin)."""
        expense = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(expense, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(expense_id=expense.id, user=request.user, **serializer.validated_data)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (NotMemberError, ExpensePermissionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidExpenseError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data)

    def destroy(self, request, *args, **kwargs):
        """Delete an expense (payer or group admin)."""
        expense = self.get_object()
        try:
            delete_expense(expense_id=expense.id, user=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (NotMemberError, ExpensePermissionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[
            OpenApiParameter('group', str, required=True),
            OpenApiParameter('period', str, enum=SpendingPeriod.choices),
        ],
        responses={200: SpendingSummarySerializer},
    )
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """
        Per-member spending of a group.

        GET /api/expenses/summary/?group={id}&period=current_month
        """
        query = SpendingSummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            summary = get_spending_summary(
                group_id=query.validated_data['group'],
                user=request.user,
                period=query.validated_data['period']
            )
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(SpendingSummarySerializer(summary).data)
