from __future__ import annotations

from django import forms

from .base import PayloadFormMixin


class CustomerForm(PayloadFormMixin, forms.Form):
    customer_code = forms.CharField(max_length=50)
    customer_name = forms.CharField(max_length=255)
    search_name = forms.CharField(max_length=255, required=False)
    customer_type_code = forms.CharField(max_length=50, required=False)
    salesperson_code = forms.CharField(max_length=20, required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "customer_code" in self.fields:
            self.fields["customer_code"].error_messages["required"] = "Customer code is required"
        if "customer_name" in self.fields:
            self.fields["customer_name"].error_messages["required"] = "Customer name is required"

    def clean_customer_code(self):
        code = self.cleaned_data["customer_code"].strip()
        if not code:
            raise forms.ValidationError("Customer code is required")
        return code

    def clean_customer_name(self):
        name = self.cleaned_data["customer_name"].strip()
        if not name:
            raise forms.ValidationError("Customer name is required")
        return name
