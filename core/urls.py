from django.urls import include, path

urlpatterns = [
    path("trending/", include("trending.urls")),
]
