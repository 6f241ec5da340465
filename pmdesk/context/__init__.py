"""Project context and prompt assembly for PM questions."""

from .assembler import assemble
from .prompt import compose

__all__ = ["assemble", "compose"]
