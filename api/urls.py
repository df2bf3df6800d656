from django.urls import path

from . import views

urlpatterns = [
    path("import/preview", views.preview_import, name="import-preview"),
    path("properties", views.properties, name="properties"),
]
