from __future__ import annotations

from django import forms
from django.conf import settings
from django.contrib.auth.forms import AuthenticationForm
from django.core.exceptions import ValidationError

from .models import User


class LoginForm(AuthenticationForm):
    username = forms.EmailField(label="Email")

    def clean_username(self) -> str:
        return (self.cleaned_data.get("username") or "").strip().lower()


class RegisterForm(forms.ModelForm):
    password = forms.CharField(label="Password", widget=forms.PasswordInput)
    confirm_password = forms.CharField(label="Confirm password", widget=forms.PasswordInput)

    class Meta:
        model = User
        fields = ["full_name", "email"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["full_name"].required = True
        self.fields["email"].required = True

    def clean_full_name(self) -> str:
        full_name = (self.cleaned_data.get("full_name") or "").strip()
        if not full_name:
            raise ValidationError("Full name is required.")
        return full_name

    def clean_email(self) -> str:
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError("An account with this email already exists.")
        return email

    def clean(self):
        cleaned = super().clean()
        password = cleaned.get("password") or ""
        if password != (cleaned.get("confirm_password") or ""):
            self.add_error("confirm_password", "Passwords do not match.")
        elif len(password) < settings.SHIFTTRACK_MIN_PASSWORD_LENGTH:
            self.add_error("password", f"Password must be at least {settings.SHIFTTRACK_MIN_PASSWORD_LENGTH} characters.")
        return cleaned

    def save(self, commit=True) -> User:
        user: User = super().save(commit=False)
        user.username = self.cleaned_data["email"]
        parts = [p for p in self.cleaned_data["full_name"].split(" ") if p]
        user.first_name = parts[0] if parts else ""
        user.last_name = " ".join(parts[1:]) if len(parts) > 1 else ""
        user.set_password(self.cleaned_data["password"])
        if commit:
            user.save()
        return user


class ProfileForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ["full_name"]

    def clean_full_name(self) -> str:
        full_name = (self.cleaned_data.get("full_name") or "").strip()
        if not full_name:
            raise ValidationError("Full name is required.")
        return full_name
