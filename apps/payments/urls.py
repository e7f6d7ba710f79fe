from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'payments'

router = DefaultRouter()
router.register(r'', views.PaymentViewSet, basename='payment')

urlpatterns = [
    # GET    /api/payments/                - List payments (?group=&status=)
    # POST   /api/payments/                - Record payment (pending)
    # GET    /api/payments/{id}/           - Payment detail
    # PUT    /api/payments/{id}/           - Edit (participant or admin)
    # PATCH  /api/payments/{id}/           - Partial edit (participant or admin)
    # DELETE /api/payments/{id}/           - Delete (participant or admin)
    # POST   /api/payments/{id}/complete/  - pending -> completed
    # POST   /api/payments/{id}/cancel/    - pending -> cancelled
    path('', include(router.urls)),
]
