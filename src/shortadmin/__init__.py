"""Back-office core for the URL-shortener admin console."""

__version__ = "0.1.0"
