"""Pydantic data models for orgdo."""

from orgdo.models.config import Config

__all__ = ["Config"]
