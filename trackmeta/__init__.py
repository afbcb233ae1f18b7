"""Track metadata service: ISRC lookups backed by the Spotify catalog."""

__version__ = "0.1.0"
