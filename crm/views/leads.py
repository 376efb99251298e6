from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers import LeadCenterQuerySerializer, SearchQuerySerializer
from ..services import lead_service


class LeadSearchView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = SearchQuerySerializer(data=request.query_params.dict())
        params.is_valid(raise_exception=True)
        return Response(lead_service.search_leads(params.validated_data["q"], params.validated_data["limit"]))


class LeadCenterView(APIView):
    """Paged lead center rows.

    Query params: ``status``, ``priority`` and ``assigned_to`` (repeatable),
    ``lead_source``, ``next_step_due_from``, ``next_step_due_to``,
    ``search``, ``page`` and ``limit``.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = LeadCenterQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        filters = dict(params.validated_data)
        page = filters.pop("page")
        limit = filters.pop("limit")
        return Response(lead_service.list_lead_center(filters, page=page, limit=limit))


class LeadStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(lead_service.fetch_lead_center_stats())


class LeadDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, lead_id):
        return Response(lead_service.update_lead(lead_id, request.data))
