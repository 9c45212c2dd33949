"""TVEncode - Batch video encoder driving ffmpeg."""

__version__ = "0.1.0"
