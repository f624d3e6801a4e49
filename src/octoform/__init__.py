"""Declarative reconciliation of GitHub resources."""

__version__ = "0.1.0"
