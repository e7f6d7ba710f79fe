from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/              - List user's groups
    # POST   /api/groups/              - Create group
    # GET    /api/groups/{id}/         - Get group details
    # PUT    /api/groups/{id}/         - Update group (admin)
    # PATCH  /api/groups/{id}/         - Partial update (admin)
    # DELETE /api/groups/{id}/         - Delete group (owner)

    # Custom group actions
    # GET    /api/groups/{id}/members/              - List members
    # POST   /api/groups/{id}/leave/                - Leave group
    # POST   /api/groups/{id}/update_member_role/   - Update member role (admin)
    # DELETE /api/groups/{id}/remove_member/        - Remove member (admin)
    # GET    /api/groups/{id}/invites/              - List invites
    # POST   /api/groups/{id}/invites/              - Create invite

    path('', include(router.urls)),
]
