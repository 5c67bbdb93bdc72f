"""SwiftRoute route sequencing and metrics engine."""

__version__ = "0.1.0"
