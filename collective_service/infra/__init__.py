"""Collective service infrastructure."""
