"""Launch-time remote config gate for a WebView wrapper app"""

__version__ = "0.1.0"
