"""vba-blocks: dependency resolution and build graph assembly for VBA projects."""

__version__ = "0.1.0"
