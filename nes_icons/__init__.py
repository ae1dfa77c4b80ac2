"""
nes-icons: icon font build pipeline.
"""

__version__ = "1.0.0"
