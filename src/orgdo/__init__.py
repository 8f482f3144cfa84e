"""orgdo - Manage org-mode task outlines from the command line."""

__version__ = "0.1.0"
