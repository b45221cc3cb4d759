"""Personal portfolio and blog: content loading, rendering, feed and previews."""

__version__ = "0.1.0"
