"""Inkwell rendering surface.

Inkwell ships no concrete renderer; hosts implement the callback
protocols and pass them to ``render``.

"""

from inkwell.renderers.protocol import ElementRenderer, LeafRenderer, render

__all__ = ["ElementRenderer", "LeafRenderer", "render"]
