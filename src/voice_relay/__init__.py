"""Voice relay: text-to-speech over HTTP and WebSocket."""

__version__ = "0.1.0"
