"""Action utilities and their options."""

from .options import ActionOptions, DEFAULT_ACTION_TIMEOUT, StepRecorder
from . import utils as actions

__all__ = ["ActionOptions", "DEFAULT_ACTION_TIMEOUT", "StepRecorder", "actions"]
