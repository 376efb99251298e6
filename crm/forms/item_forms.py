from __future__ import annotations

from django import forms

from ..services.batch_item_service import UPDATE_OPTIONS


class BatchEditForm(forms.Form):
    """Selected item codes, the new values and which of them to apply."""

    item_codes = forms.JSONField(required=False)
    description = forms.CharField(required=False)
    posting_group = forms.CharField(max_length=50, required=False)
    base_unit_code = forms.CharField(max_length=20, required=False)
    unit_price = forms.DecimalField(required=False, min_value=0, max_digits=14, decimal_places=4)
    vendor_code = forms.CharField(max_length=50, required=False)
    brand = forms.CharField(max_length=100, required=False)
    attribut_1 = forms.CharField(max_length=100, required=False)
    pricelist = forms.BooleanField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for flag in UPDATE_OPTIONS:
            self.fields[flag] = forms.BooleanField(required=False)

    def clean_item_codes(self):
        codes = self.cleaned_data.get("item_codes")
        if codes is None:
            return []
        if not isinstance(codes, list) or not all(isinstance(c, str) for c in codes):
            raise forms.ValidationError("item_codes must be a list of strings")
        return [c for c in codes if c.strip()]

    def update_data(self):
        data = {column: self.cleaned_data.get(column) for column in UPDATE_OPTIONS.values()}
        if data.get("unit_price") is not None:
            data["unit_price"] = float(data["unit_price"])
        return data

    def options(self):
        return {flag: bool(self.cleaned_data.get(flag)) for flag in UPDATE_OPTIONS}
