from django.urls import path

from . import views

# path(route, view, name=...)

urlpatterns = [
    path("stores/<int:store_id>/schedule/", views.schedule_view, name="schedule"),
    path("stores/<int:store_id>/schedule/publish/", views.schedule_publish, name="schedule_publish"),
    path("stores/<int:store_id>/shifts/create/", views.shift_create, name="shift_create"),
    path("stores/<int:store_id>/shifts/<int:shift_id>/json/", views.shift_details, name="shift_details"),
    path("stores/<int:store_id>/shifts/<int:shift_id>/update/", views.shift_update, name="shift_update"),
    path("stores/<int:store_id>/shifts/<int:shift_id>/delete/", views.shift_delete, name="shift_delete"),
    path("stores/<int:store_id>/availability/", views.my_availability, name="my_availability"),
    path("stores/<int:store_id>/availability/clear/", views.availability_delete, name="availability_delete"),
    path("stores/<int:store_id>/availability/team/", views.team_availability_view, name="team_availability"),
]
