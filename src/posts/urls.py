"""Routing for the post update endpoint."""

from django.urls import path

from .views import PostUpdateView

urlpatterns = [
    path("sites/<str:site>/posts/<str:post_id>", PostUpdateView.as_view(), name="post-update"),
]
