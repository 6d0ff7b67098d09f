"""Readiness, adaptive TDEE and cycle-phase scoring for athlete coaching."""

__version__ = "0.1.0"
