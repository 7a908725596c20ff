"""
HarborQuote Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("pricing/evaluate", views.pricing_evaluate_view),
    path("pricing/catalog", views.pricing_catalog_view),
    path("quote/steps", views.quote_steps_view),
    path("quote/summary", views.quote_summary_view),
]
