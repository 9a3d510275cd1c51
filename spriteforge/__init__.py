"""Video to sprite sheet: frame sampling, chroma keying and grid packing."""

__version__ = "0.1.0"
