from django.urls import path

from . import views

app_name = "trending"

urlpatterns = [
    path("", views.trending_view, name="summary"),
    path("prefetch/status/", views.prefetch_status_view, name="prefetch_status"),
]
