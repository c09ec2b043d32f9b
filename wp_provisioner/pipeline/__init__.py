"""Provisioning pipelines."""

from .wordpress import build_wordpress_pipeline


__all__ = ["build_wordpress_pipeline"]
