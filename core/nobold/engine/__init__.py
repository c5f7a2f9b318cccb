"""Engine module - command orchestration."""

from nobold.engine.model_manager import ModelManager

__all__ = ["ModelManager"]
