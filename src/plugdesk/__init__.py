"""plugdesk: manage user-installed plugins."""

__version__ = "0.1.0"
