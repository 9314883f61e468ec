"""SillyGeeks - AI-powered tech news aggregation."""

__version__ = "0.1.0"
