"""Kubernetes network policy model, matching helpers and test-case building blocks."""

__version__ = "0.1.0"