"""URL configuration for registry_site project."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("django_carbon_registry.urls")),
]
