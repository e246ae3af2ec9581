"""Village chase: a side-scrolling endless runner with Gemini flavor text."""

__version__ = "0.1.0"
