"""Client SDK for the Radio Code Calculator web API."""

__version__ = "1.1.5"
