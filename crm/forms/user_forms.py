from __future__ import annotations

from django import forms

ROLES = [("admin", "Admin"), ("user", "User")]
LEAVE_CREDIT_FIELDS = ("al_credit", "bl_credit", "sl_credit")


class UserEditForm(forms.Form):
    """Admin edit of a backend ``profiles`` row.

    ``al_credit``, ``bl_credit`` and ``sl_credit`` are annual, business and
    sick leave credits. A password is only reset when ``generate_password``
    is ticked and ``password`` is given.
    """

    full_name = forms.CharField(max_length=255)
    role = forms.ChoiceField(choices=ROLES)
    spp_code = forms.CharField(max_length=20, required=False)
    generate_password = forms.BooleanField(required=False)
    password = forms.CharField(required=False, min_length=8, strip=False)
    al_credit = forms.DecimalField(required=False, max_digits=6, decimal_places=2)
    bl_credit = forms.DecimalField(required=False, max_digits=6, decimal_places=2)
    sl_credit = forms.DecimalField(required=False, max_digits=6, decimal_places=2)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("generate_password") and not cleaned.get("password"):
            self.add_error("password", "A new password is required when resetting it")
        return cleaned
