from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/                 - List expenses (?group=&category=&date_from=&date_to=)
    # POST   /api/expenses/                 - Log expense
    # GET    /api/expenses/{id}/            - Expense detail
    # PUT    /api/expenses/{id}/            - Update (payer or admin)
    # PATCH  /api/expenses/{id}/            - Partial update (payer or admin)
    # DELETE /api/expenses/{id}/            - Delete (payer or admin)
    # GET    /api/expenses/summary/         - Spending summary (?group=&period=)
    path('', include(router.urls)),
]
