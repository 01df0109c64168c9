"""
External service integration components for Pienkuu.
"""

from .http_fetcher import HttpFetcher

__all__ = ["HttpFetcher"]
