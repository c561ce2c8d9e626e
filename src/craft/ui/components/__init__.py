"""Built-in components."""

from craft.ui.components.box import Box
from craft.ui.components.label import Label

__all__ = ["Box", "Label"]
