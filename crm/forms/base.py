from __future__ import annotations

from typing import Any, Dict, Iterable

from django import forms


class PayloadFormMixin:
    """Turn cleaned form data into a row payload for the backend.

    Empty optional strings are sent as ``None`` so the database stores
    ``NULL`` rather than ``""``. With ``partial=True`` only fields present in
    the submitted data are validated and returned.
    """

    def __init__(self, *args, partial: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.partial = partial
        if partial:
            submitted = set(self.data.keys())
            for name in list(self.fields):
                if name not in submitted:
                    del self.fields[name]

    def payload(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        data = {}
        for name, value in self.cleaned_data.items():
            if name in exclude:
                continue
            if isinstance(value, str):
                value = value.strip() or None
            data[name] = value
        return data


def errors_as_text(form: forms.Form) -> str:
    """Flatten form errors into a single ``field: message`` line."""

    parts = []
    for field, messages in form.errors.items():
        label = "" if field == "__all__" else f"{field}: "
        parts.append(label + " ".join(messages))
    return "; ".join(parts)
