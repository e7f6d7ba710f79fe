from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'reminders'

router = DefaultRouter()
router.register(r'', views.RecurringReminderViewSet, basename='reminder')

urlpatterns = [
    # GET    /api/reminders/                - List reminders (?group=&is_active=)
    # POST   /api/reminders/                - Create reminder (admin)
    # GET    /api/reminders/{id}/           - Reminder detail
    # PUT    /api/reminders/{id}/           - Update (admin)
    # PATCH  /api/reminders/{id}/           - Partial update (admin)
    # DELETE /api/reminders/{id}/           - Delete (admin)
    # POST   /api/reminders/{id}/toggle/    - Pause or resume (admin)
    # POST   /api/reminders/{id}/advance/   - Roll due date one period (admin)
    # GET    /api/reminders/due/            - Due soon (?days=&group=)
    path('', include(router.urls)),
]
