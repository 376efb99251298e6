"""Sales report endpoints: MTD and turnover."""

from django.http import Http404, HttpResponse
from django.utils import timezone
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exports.mtd_export import ExportMetadata, export_payload
from ..serializers import MTDExportQuerySerializer, MTDQuerySerializer, TurnoverQuerySerializer
from ..services import mtd_service, turnover_service, week_service
from ..services.scope import requester_for, resolve_salesperson


def _validated(serializer_class, request):
    # plain dict so omitted booleans fall back to their defaults
    serializer = serializer_class(data=request.query_params.dict())
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _mtd_report(request, params):
    return mtd_service.get_mtd_report(
        requester_for(request.user),
        params["year"],
        params["month"],
        params.get("salesperson"),
        include_delivery_fees=params["include_delivery_fees"],
        include_credit_memos=params["include_credit_memos"],
    )


class MTDReportView(APIView):
    """Month-to-date daily sales with summary.

    Query params: ``year``, ``month``, ``salesperson`` (admins only, ``all``
    by default), ``include_delivery_fees``, ``include_credit_memos``.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = _validated(MTDQuerySerializer, request)
        return Response(_mtd_report(request, params).as_dict())


class MTDExportView(APIView):
    """Download the MTD report as CSV or Excel (``format=csv|xls``)."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = _validated(MTDExportQuerySerializer, request)
        report = _mtd_report(request, params)
        meta = ExportMetadata(
            year=params["year"],
            month=params["month"],
            salesperson=report.salesperson_code or "all",
            include_delivery_fees=params["include_delivery_fees"],
            include_credit_memos=params["include_credit_memos"],
        )
        payload = export_payload(report, meta, params["format"])
        response = HttpResponse(payload["content"], content_type=payload["content_type"])
        response["Content-Disposition"] = f'attachment; filename="{payload["filename"]}"'
        return response


class TurnoverView(APIView):
    """Monthly turnover, totals and last posting dates for a date range."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = _validated(TurnoverQuerySerializer, request)
        requester = requester_for(request.user)
        code = resolve_salesperson(requester, params.get("salesperson_code"))
        overview = turnover_service.get_turnover_overview(
            requester, params["from_date"], params["to_date"], code
        )
        return Response(overview)


class WeekListView(APIView):
    """Business weeks of ``year``; ``?ensure=1`` populates missing ones first."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, year):
        if request.query_params.get("ensure"):
            week_service.ensure_weeks_populated(year)
        return Response(
            {
                "year": year,
                "weeks": week_service.get_weeks_for_year(year),
                "max_week_number": week_service.get_max_week_number(year),
            }
        )


class CurrentWeekView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        today = timezone.localdate()
        week = week_service.get_current_week_number(today)
        return Response(
            {
                "year": today.year,
                "week_number": week,
                "period": week_service.format_week_period(today.year, week),
            }
        )


class WeekDetailView(APIView):
    """One business week with its ``DD/MM to DD/MM`` period."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, year, week):
        if not week_service.is_valid_week(year, week):
            raise Http404
        return Response(
            {
                "year": year,
                "week_number": week,
                "week": week_service.get_week(year, week),
                "period": week_service.format_week_period(year, week),
            }
        )
