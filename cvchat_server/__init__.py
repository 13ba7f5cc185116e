"""CV Chat Server: chat proxy with short-lived session memory for the CV generator site."""

__version__ = "0.1.0"
