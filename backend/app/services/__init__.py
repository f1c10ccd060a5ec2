"""
Backend helpers for the Community Issues API.
"""

from . import serializers

__all__ = ["serializers"]
