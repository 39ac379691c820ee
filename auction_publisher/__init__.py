"""Publish auction listings as Shopify blog articles."""

__version__ = "0.1.0"
