"""Batch item maintenance and the items -> stock sync."""

from django.core.exceptions import ValidationError
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..forms.base import errors_as_text
from ..forms.item_forms import BatchEditForm
from ..permissions import IsSalesAdmin
from ..serializers import ItemCodesSerializer
from ..services import batch_item_service, items_stock_sync_service
from ..services.list_utils import csv_response


def _result(result):
    if result["success"]:
        code = status.HTTP_200_OK
    elif result.get("errors"):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response(result, status=code)


class BatchUpdateItemsView(APIView):
    """Apply the ticked ``update_*`` fields to every code in ``item_codes``."""

    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def post(self, request):
        form = BatchEditForm(data=request.data)
        if not form.is_valid():
            raise ValidationError(errors_as_text(form))
        result = batch_item_service.batch_update_items(
            form.cleaned_data["item_codes"], form.update_data(), form.options()
        )
        return _result(result)


class BatchDeleteItemsView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def post(self, request):
        serializer = ItemCodesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = batch_item_service.batch_delete_items(serializer.validated_data["item_codes"])
        return _result(result)


class ItemsExportView(APIView):
    """CSV of the selected items (``?item_codes=A&item_codes=B``)."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        codes = [c for c in request.query_params.getlist("item_codes") if c]
        result = batch_item_service.export_items_csv(codes)
        if not result["success"]:
            return Response(result, status=status.HTTP_400_BAD_REQUEST)
        return csv_response(result["csv_data"], "items_export.csv")


class ItemsStockSyncView(APIView):
    """``GET`` sync status and statistics; ``POST`` runs a manual sync."""

    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def get(self, request):
        try:
            days = max(int(request.query_params.get("days", 7)), 1)
        except ValueError:
            days = 7
        return Response(
            {
                "is_running": items_stock_sync_service.is_sync_running(),
                "last_sync": items_stock_sync_service.get_last_sync_info(),
                "statistics": items_stock_sync_service.get_sync_statistics(days),
            }
        )

    def post(self, request):
        if items_stock_sync_service.is_sync_running():
            return Response(
                {"detail": "A sync is already running.", "status_code": 409},
                status=status.HTTP_409_CONFLICT,
            )
        result = items_stock_sync_service.manual_sync_all_items()
        if request.data.get("refresh_view"):
            refreshed = items_stock_sync_service.refresh_stock_summary_view()
        else:
            refreshed = None
        return Response({"result": result.as_dict(), "refresh": refreshed})


class SyncValidationView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def get(self, request):
        return Response(items_stock_sync_service.validate_sync_system())
