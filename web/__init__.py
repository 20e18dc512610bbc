"""Web interface for maintenance tracking."""
