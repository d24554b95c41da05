"""
=============================================================================
STORE URL CONFIGURATION
=============================================================================

- /dashboard/                       → the user's stores and pending requests
- /stores/new/, /stores/join/       → onboarding
- /stores/<id>/                     → store details and people
- /stores/<id>/people/...           → membership changes (managers only)
=============================================================================
"""
from django.urls import path

from . import views

urlpatterns = [
    # -------------------------------------------------------------------------
    # DASHBOARD & ONBOARDING
    # -------------------------------------------------------------------------
    path("dashboard/", views.dashboard, name="dashboard"),
    path("stores/new/", views.store_create, name="store_create"),
    path("stores/join/", views.join_store, name="join_store"),
    path("stores/<int:store_id>/requests/review/", views.review_request, name="review_request"),

    # -------------------------------------------------------------------------
    # STORE DETAIL
    # -------------------------------------------------------------------------
    path("stores/<int:store_id>/", views.store_detail, name="store_detail"),
    path("stores/<int:store_id>/update/", views.store_update, name="store_update"),
    path("stores/<int:store_id>/join-code/", views.store_regenerate_code, name="store_regenerate_code"),
    path("stores/<int:store_id>/delete/", views.store_delete, name="store_delete"),
    path("stores/<int:store_id>/leave/", views.store_leave, name="store_leave"),

    # -------------------------------------------------------------------------
    # PEOPLE
    # -------------------------------------------------------------------------
    path("stores/<int:store_id>/people/add/", views.person_add, name="person_add"),
    path("stores/<int:store_id>/people/remove/", views.person_remove, name="person_remove"),
    path("stores/<int:store_id>/people/promote/", views.person_promote, name="person_promote"),
    path("stores/<int:store_id>/people/primary/", views.primary_transfer, name="primary_transfer"),
]
