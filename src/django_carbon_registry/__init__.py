"""Django Carbon Registry - carbon-offset projects, credits and their lifecycle."""

__version__ = "0.1.0"
