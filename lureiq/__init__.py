"""LureIQ — condition-driven bass lure recommendations with catch feedback."""

__version__ = "0.1.0"
