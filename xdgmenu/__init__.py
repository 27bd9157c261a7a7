"""Reading, rule matching and layout of freedesktop.org XDG menu trees."""

__version__ = "0.1.0"

__all__ = ["applink", "context", "layout", "reader", "rules", "xmlhelper"]