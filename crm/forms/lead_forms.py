from __future__ import annotations

from django import forms

from .base import PayloadFormMixin

LEAD_STATUSES = [
    ("contacted", "Contacted"),
    ("meeting_scheduled", "Meeting scheduled"),
    ("samples_sent", "Samples sent"),
    ("samples_followed_up", "Samples followed up"),
    ("negotiating", "Negotiating"),
    ("closed_won", "Closed won"),
    ("closed_lost", "Closed lost"),
]

LEAD_PRIORITIES = [("Low", "Low"), ("Medium", "Medium"), ("High", "High")]


class LeadEditForm(PayloadFormMixin, forms.Form):
    lead_title = forms.CharField(max_length=255, error_messages={"required": "Lead title is required"})
    lead_description = forms.CharField(required=False)
    status = forms.ChoiceField(choices=LEAD_STATUSES)
    lead_source = forms.CharField(max_length=100, required=False)
    priority = forms.ChoiceField(choices=LEAD_PRIORITIES)
    next_step = forms.CharField(required=False)
    next_step_due = forms.DateField(required=False)
    estimated_value = forms.DecimalField(required=False, max_digits=14, decimal_places=2)
    close_probability = forms.IntegerField(required=False, min_value=0, max_value=100)
    contact_id = forms.CharField(required=False)
    customer_channel = forms.CharField(max_length=100, required=False)

    def payload(self, exclude=()):
        data = super().payload(exclude)
        if data.get("next_step_due") is not None:
            data["next_step_due"] = data["next_step_due"].isoformat()
        if data.get("estimated_value") is not None:
            data["estimated_value"] = float(data["estimated_value"])
        return data
