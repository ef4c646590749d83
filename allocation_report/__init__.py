"""Resource allocation report service."""
