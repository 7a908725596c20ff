"""
HarborQuote HTTP API - Public API
=================================
"""

from core.http_api.contracts import (
    CatalogPricingRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    PricingEvaluateRequest,
    QuoteStepsRequest,
    QuoteSummaryRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    invalid_request_response,
    success_response,
)
from core.http_api.handlers import (
    post_pricing_catalog,
    post_pricing_evaluate,
    post_quote_steps,
    post_quote_summary,
)

__all__ = [
    "CatalogPricingRequest",
    "PricingEvaluateRequest",
    "QuoteStepsRequest",
    "QuoteSummaryRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "HttpApiDependencies",
    "error_response",
    "invalid_request_response",
    "success_response",
    "post_pricing_catalog",
    "post_pricing_evaluate",
    "post_quote_steps",
    "post_quote_summary",
]
