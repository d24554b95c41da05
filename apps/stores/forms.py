"""
=============================================================================
STORE FORMS
=============================================================================

- StoreForm: create / edit a store's details
- JoinStoreForm: join code plus the role being requested
- AddEmployeeForm: add a registered user to a store by email

Join-code format and membership rules are checked again in services.py;
the forms only shape the input.
=============================================================================
"""
from __future__ import annotations

from django import forms

from .models import Store


class StoreForm(forms.ModelForm):
    class Meta:
        model = Store
        fields = ["name", "address", "phone_number"]
        labels = {"phone_number": "Phone"}

    def clean_name(self) -> str:
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Store name is required.")
        return name


class JoinStoreForm(forms.Form):
    AS_EMPLOYEE = "employee"
    AS_MANAGER = "manager"

    code = forms.CharField(label="Store code", max_length=Store.JOIN_CODE_LENGTH)
    join_as = forms.ChoiceField(
        choices=[(AS_EMPLOYEE, "Employee"), (AS_MANAGER, "Manager (needs approval)")],
        initial=AS_EMPLOYEE,
    )


class AddEmployeeForm(forms.Form):
    email = forms.EmailField(label="Email")
