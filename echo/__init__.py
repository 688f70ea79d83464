"""Echo: register mock HTTP endpoints at runtime and serve them back."""

__version__ = "0.1.0"
