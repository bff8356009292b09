"""Configuration loading utilities for shapesim."""

from .schema import (
    WorldConfig,
    load_config,
)

__all__ = ["WorldConfig", "load_config"]
