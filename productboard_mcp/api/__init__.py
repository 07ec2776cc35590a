"""Productboard REST API access."""

from .client import ProductboardAPIClient, raise_for_api_status

__all__ = ["ProductboardAPIClient", "raise_for_api_status"]
