"""
DUKA Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("daily-forms", views.daily_forms_list_view),
    path("daily-forms/create", views.daily_form_create_view),
    path("daily-forms/draft", views.daily_form_draft_view),
    path("daily-forms/preview", views.daily_form_preview_view),
    path("daily-forms/<str:form_id>", views.daily_form_detail_view),
    path("daily-forms/<str:form_id>/submit", views.daily_form_submit_view),
    path("products", views.products_view),
    path("products/<str:product_id>", views.product_detail_view),
]
