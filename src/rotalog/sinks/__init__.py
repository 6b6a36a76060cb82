"""Built-in sinks."""

from .base import Sink
from .console import ConsoleSink
from .multiplex import MultiplexSink
from .rotating_file import RotatingFileSink

__all__ = [
    "Sink",
    "ConsoleSink",
    "MultiplexSink",
    "RotatingFileSink",
]
