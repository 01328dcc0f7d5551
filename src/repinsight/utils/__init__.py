"""Utility modules for RepInsight."""

from .data_prep import export_to_json, load_reviews, parse_reviews

__all__ = [
    "export_to_json",
    "load_reviews",
    "parse_reviews",
]
