"""Customers, contacts and customer maintenance requests."""

from django.http import Http404, HttpResponse
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..pdf import generate_customer_request_pdf
from ..pdf.logo import load_logo
from ..permissions import IsSalesAdmin
from ..serializers import (
    ContactSearchSerializer,
    EmailSerializer,
    RequestStatusSerializer,
    SearchQuerySerializer,
)
from ..services import customer_request_service, customer_service
from ..services.month_grouping import group_requests_by_month
from ..services.scope import requester_for
from .base import plain_data


class CustomerListView(APIView):
    """``GET ?q=`` searches customers; ``POST`` creates one."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = SearchQuerySerializer(data=request.query_params.dict())
        params.is_valid(raise_exception=True)
        return Response(
            customer_service.search_customers(params.validated_data["q"], params.validated_data["limit"])
        )

    def post(self, request):
        return Response(customer_service.create_customer(request.data), status=status.HTTP_201_CREATED)


class CustomerDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, code):
        customer = customer_service.get_customer(code)
        if customer is None:
            raise Http404
        return Response(customer)

    def patch(self, request, code):
        return Response(customer_service.update_customer(code, request.data))

    def delete(self, request, code):
        ok, message = customer_service.delete_customer(code)
        if not ok:
            return Response({"detail": message, "status_code": 409}, status=status.HTTP_409_CONFLICT)
        return Response({"detail": message})


class ContactSearchView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        params = ContactSearchSerializer(data=request.query_params.dict())
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return Response(customer_service.search_contacts(data["customer_code"], data["q"], data["limit"]))


class CustomerRequestListView(APIView):
    """List (``?q=``, ``?grouped=1`` for month groups) or create requests.

    ``POST`` with ``draft=true`` stores a draft; otherwise the request is
    submitted for approval.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        rows = customer_request_service.list_requests(
            requester_for(request.user), request.query_params.get("q", "")
        )
        if request.query_params.get("grouped"):
            return Response(group_requests_by_month(rows))
        return Response(rows)

    def post(self, request):
        data = plain_data(request)
        is_draft = str(data.pop("draft", "")).lower() in ("1", "true", "yes")
        created = customer_request_service.create_request(requester_for(request.user), data, is_draft)
        return Response(created, status=status.HTTP_201_CREATED)


def _get_request_or_404(request, request_id):
    row = customer_request_service.get_request(requester_for(request.user), request_id)
    if row is None:
        raise Http404
    return row


class CustomerRequestDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, request_id):
        return Response(_get_request_or_404(request, request_id))

    def patch(self, request, request_id):
        updated = customer_request_service.update_request(requester_for(request.user), request_id, request.data)
        return Response(updated)

    def delete(self, request, request_id):
        customer_request_service.delete_request(requester_for(request.user), request_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CustomerRequestStatusView(APIView):
    """Approve, reject or reopen a request (admins only)."""

    permission_classes = [permissions.IsAuthenticated, IsSalesAdmin]

    def post(self, request, request_id):
        serializer = RequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            customer_request_service.update_status(request_id, serializer.validated_data["status"])
        )


class CustomerRequestEmailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, request_id):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer_request_service.send_request_email(
            requester_for(request.user), request_id, serializer.validated_data["email"]
        )
        return Response({"detail": "Email notification sent successfully"})


class CustomerRequestPdfView(APIView):
    """Download a customer request as PDF."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, request_id):
        row = _get_request_or_404(request, request_id)
        pdf = generate_customer_request_pdf(
            row,
            salesperson_name=customer_request_service.get_salesperson_name(row.get("salesperson_code")),
            logo=load_logo(),
        )
        response = HttpResponse(pdf, content_type="application/pdf")
        name = (row.get("customer_name") or "customer").replace(" ", "_")
        response["Content-Disposition"] = f'attachment; filename="customer_request_{name}.pdf"'
        return response
