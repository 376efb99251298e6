"""Admin-only endpoints: user profiles and notifications."""

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..permissions import IsSalesAdmin
from ..serializers import AdminNotificationSerializer, FollowUpNotificationSerializer
from ..services import notification_service, user_admin_service
from ..services.scope import requester_for
from .base import plain_data


class ProfileListView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def get(self, request):
        return Response(user_admin_service.list_profiles())


class ProfileUpdateView(APIView):
    """Update a profile; the signed-in admin is recorded in the audit log."""

    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def patch(self, request, user_id):
        admin_id = requester_for(request.user).user_id
        ok, message = user_admin_service.update_user(user_id, plain_data(request), admin_id)
        code = status.HTTP_200_OK if ok else status.HTTP_400_BAD_REQUEST
        return Response({"success": ok, "message": message}, status=code)


class FollowUpNotificationView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = FollowUpNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, message = notification_service.create_activity_follow_up_notification(
            data["activity_id"], data["note"], requester_for(request.user).user_id
        )
        return Response({"success": ok, "message": message}, status=status.HTTP_200_OK if ok else status.HTTP_400_BAD_REQUEST)


class AdminNotificationView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = AdminNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, message = notification_service.create_admin_notification(
            data["type"],
            data["entity_id"],
            data["title"],
            data["message"],
            requester_for(request.user).user_id,
        )
        return Response({"success": ok, "message": message}, status=status.HTTP_200_OK if ok else status.HTTP_400_BAD_REQUEST)
