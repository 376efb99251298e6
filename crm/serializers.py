"""Request validation for the CRM API.

Rows come back from the backend as plain dictionaries, so these serializers
only validate incoming query parameters and bodies; responses are returned
as-is.
"""

from datetime import date

from rest_framework import serializers

from .forms.lead_forms import LEAD_PRIORITIES, LEAD_STATUSES
from .services.customer_request_service import STATUSES as REQUEST_STATUSES


def _current_year() -> int:
    return date.today().year


def _current_month() -> int:
    return date.today().month


class MTDQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, default=_current_year)
    month = serializers.IntegerField(min_value=1, max_value=12, default=_current_month)
    salesperson = serializers.CharField(required=False, allow_blank=True, default="all")
    include_delivery_fees = serializers.BooleanField(default=False)
    include_credit_memos = serializers.BooleanField(default=True)


class MTDExportQuerySerializer(MTDQuerySerializer):
    format = serializers.ChoiceField(choices=["csv", "xls"], default="csv")


class TurnoverQuerySerializer(serializers.Serializer):
    from_date = serializers.DateField()
    to_date = serializers.DateField()
    salesperson_code = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["from_date"] > attrs["to_date"]:
            raise serializers.ValidationError("from_date must not be after to_date")
        return attrs


class ItemCodesSerializer(serializers.Serializer):
    item_codes = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="")
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


class ContactSearchSerializer(SearchQuerySerializer):
    customer_code = serializers.CharField()


class LeadCenterQuerySerializer(serializers.Serializer):
    status = serializers.ListField(
        child=serializers.ChoiceField(choices=[value for value, _ in LEAD_STATUSES]), required=False
    )
    priority = serializers.ListField(
        child=serializers.ChoiceField(choices=[value for value, _ in LEAD_PRIORITIES]), required=False
    )
    assigned_to = serializers.ListField(child=serializers.CharField(), required=False)
    lead_source = serializers.CharField(required=False, allow_blank=True)
    next_step_due_from = serializers.DateField(required=False)
    next_step_due_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=200, default=50)


class RequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=list(REQUEST_STATUSES))


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class DocumentUploadSerializer(serializers.Serializer):
    folder = serializers.RegexField(r"^[\w-]+(/[\w-]+)*$")
    file = serializers.FileField()
    description = serializers.CharField(required=False, allow_blank=True)


class DocumentIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class FollowUpNotificationSerializer(serializers.Serializer):
    activity_id = serializers.CharField()
    note = serializers.CharField()


class AdminNotificationSerializer(serializers.Serializer):
    type = serializers.CharField()
    entity_id = serializers.CharField()
    title = serializers.CharField()
    message = serializers.CharField()


class ClaimItemSerializer(serializers.Serializer):
    item_code = serializers.CharField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.FloatField(required=False, allow_null=True)
    unit_price = serializers.FloatField(required=False, allow_null=True)


class ClaimVendorSerializer(serializers.Serializer):
    vendor_name = serializers.CharField()
    vendor_code = serializers.CharField()


class ClaimSerializer(serializers.Serializer):
    vendor = ClaimVendorSerializer()
    items = ClaimItemSerializer(many=True)
    reason = serializers.CharField()
    note = serializers.CharField(required=False, allow_blank=True, default="")
    value = serializers.FloatField(required=False, allow_null=True, default=0)
    currency = serializers.CharField(default="THB")
    claim_number = serializers.CharField(required=False, allow_blank=True)
