"""GCTalk - school community feedback feed client."""

__version__ = "0.1.0"
