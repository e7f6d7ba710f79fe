from django.urls import path
from . import views

app_name = 'invites'

urlpatterns = [
    # GET  /api/invites/{code}/          - Invite info (public)
    # POST /api/invites/{code}/accept/   - Join the group
    # POST /api/invites/{code}/revoke/   - Revoke (creator or admin)
    path('<str:code>/', views.invite_detail, name='invite-detail'),
    path('<str:code>/accept/', views.invite_accept, name='invite-accept'),
    path('<str:code>/revoke/', views.invite_revoke, name='invite-revoke'),
]
