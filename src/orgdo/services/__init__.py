"""File services for orgdo."""
