"""Domain services for the track metadata service."""
