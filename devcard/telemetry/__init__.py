"""Telemetry and observability helpers.

This package emits deterministic phase logs for card checks.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
