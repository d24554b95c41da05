from __future__ import annotations

from functools import wraps

from django.contrib.auth.views import redirect_to_login
from django.core.exceptions import PermissionDenied
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404

from .models import Store
from .services import get_store_access


def _store_view(view_func, *, check):
    @wraps(view_func)
    def _wrapped(request: HttpRequest, store_id: int, *args, **kwargs) -> HttpResponse:
        if not request.user.is_authenticated:
            return redirect_to_login(request.get_full_path())
        store = get_object_or_404(Store, pk=store_id)
        access = get_store_access(request.user, store)
        if not check(access):
            raise PermissionDenied("You don't have access to this store.")
        request.store = store
        request.store_access = access
        return view_func(request, store_id, *args, **kwargs)

    return _wrapped


def store_member_required(view_func):
    """Employees and managers of any status. Sets request.store and request.store_access."""
    return _store_view(view_func, check=lambda access: access.is_member)


def store_manager_required(view_func):
    """Approved managers only."""
    return _store_view(view_func, check=lambda access: access.is_manager)
