from .input import InputMapper, InputSource
from .messages import CHANNELS, MessageAdapter, MessageSink
from .renderer import FALLBACK_COLOR, RenderAdapter, Renderer

__all__ = [
    "CHANNELS",
    "FALLBACK_COLOR",
    "InputMapper",
    "InputSource",
    "MessageAdapter",
    "MessageSink",
    "RenderAdapter",
    "Renderer",
]
