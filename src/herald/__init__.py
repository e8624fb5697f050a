"""Herald: versioned message templates for outgoing intents."""

__version__ = "0.1.0"
