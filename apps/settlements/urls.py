from django.urls import path
from . import views

app_name = 'settlements'

urlpatterns = [
    # GET  /api/settlements/{group_id}/          - Balances and transfers
    # POST /api/settlements/{group_id}/settle/   - Record a transfer as a payment
    path('<uuid:group_id>/', views.group_settlement, name='group-settlement'),
    path('<uuid:group_id>/settle/', views.settle, name='settle'),
]
