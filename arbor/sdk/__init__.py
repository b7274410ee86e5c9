"""Programmatic entry points."""

from .run import ConfigRunResult, grow_from_config

__all__ = ["ConfigRunResult", "grow_from_config"]
