from __future__ import annotations

from django import forms

from .base import PayloadFormMixin

DOCUMENT_FLAGS = ("pp20", "company_registration", "id_card")
CONTACT_FIELDS = ("name", "position", "phone", "email", "line", "whatsapp")


class CustomerRequestForm(PayloadFormMixin, forms.Form):
    customer_name = forms.CharField(max_length=255, error_messages={"required": "Customer name is required"})
    search_name = forms.CharField(max_length=255, required=False)
    address = forms.CharField(required=False)
    city = forms.CharField(max_length=100, required=False)
    company_name = forms.CharField(max_length=255, required=False)
    company_address = forms.CharField(required=False)
    company_city = forms.CharField(max_length=100, required=False)
    customer_type_code = forms.CharField(max_length=50, required=False)
    salesperson_code = forms.CharField(max_length=20, required=False)
    customer_group = forms.CharField(max_length=50, required=False)
    region = forms.CharField(max_length=50, required=False)
    contacts = forms.JSONField(required=False)
    documents = forms.JSONField(required=False)
    credit_limit = forms.DecimalField(required=False, min_value=0, max_digits=14, decimal_places=2)
    credit_terms = forms.CharField(max_length=50, required=False)
    prepayment = forms.BooleanField(required=False)

    def clean_contacts(self):
        contacts = self.cleaned_data.get("contacts") or []
        if not isinstance(contacts, list):
            raise forms.ValidationError("Contacts must be a list")
        cleaned = []
        for index, contact in enumerate(contacts, start=1):
            if not isinstance(contact, dict) or not str(contact.get("name") or "").strip():
                raise forms.ValidationError(f"Contact {index} needs a name")
            cleaned.append({key: contact.get(key) or "" for key in CONTACT_FIELDS})
        return cleaned

    def clean_documents(self):
        documents = self.cleaned_data.get("documents") or {}
        if not isinstance(documents, dict):
            raise forms.ValidationError("Documents must be an object")
        return {flag: bool(documents.get(flag)) for flag in DOCUMENT_FLAGS}

    def payload(self, exclude=()):
        data = super().payload(exclude)
        if data.get("credit_limit") is not None:
            data["credit_limit"] = float(data["credit_limit"])
        return data
