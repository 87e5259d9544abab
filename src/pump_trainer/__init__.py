"""
Pump Studio trainer package initializer.

This package exposes the orchestrator and the deterministic analysis
helpers for external usage.  Other internal modules (e.g. API, trainer)
should be imported explicitly from their respective files.
"""

from .heuristics import compute_defaults  # noqa: F401
from .orchestrator import Orchestrator  # noqa: F401
from .reconciler import parse_orchestrator_response  # noqa: F401

__all__ = ["Orchestrator", "compute_defaults", "parse_orchestrator_response"]
