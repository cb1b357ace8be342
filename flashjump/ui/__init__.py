"""Qt-aware controllers that bind jump sessions to editor widgets."""

from .flash_controller import FlashJumpController

__all__ = ["FlashJumpController"]
