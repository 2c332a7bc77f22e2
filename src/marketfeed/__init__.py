"""Multi-provider market feed: forex, commodity and crypto quotes with provider fallback."""

__version__ = "0.1.0"
