"""Named, independently editable sections inside wiki page content."""

__version__ = "0.1.0"
