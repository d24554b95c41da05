from django.conf import settings
from django.contrib import admin
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include, path

admin.site.site_header = "ShiftTrack administration"
admin.site.site_title = "ShiftTrack"

urlpatterns = [
    path("admin/", admin.site.urls),
    # accounts owns "/" and the auth pages; stores and scheduling live under /stores/
    path("", include("apps.accounts.urls")),
    path("", include("apps.stores.urls")),
    path("", include("apps.scheduling.urls")),
]

if settings.DEBUG:
    urlpatterns += staticfiles_urlpatterns()
