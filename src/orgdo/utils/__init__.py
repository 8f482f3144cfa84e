"""Shared helpers for orgdo."""
