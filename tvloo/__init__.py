"""TVLoo: IPTV playlist and program guide addon for Stremio."""

__version__ = "2.1.0"
