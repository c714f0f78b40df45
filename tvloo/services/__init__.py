"""
Services package for TVLoo

This package contains the parsers, caches and query logic.
"""
from tvloo.services.addon_service import AddonService, build_manifest
from tvloo.services.cache import CacheStats, TimedCache
from tvloo.services.guide_parser import parse_xmltv
from tvloo.services.playlist_parser import derive_channel_id, parse_m3u
from tvloo.services.program_lookup import current_program, next_program
from tvloo.services.sources import DataSources, build_sources

__all__ = [
    'AddonService',
    'build_manifest',
    'CacheStats',
    'TimedCache',
    'parse_xmltv',
    'derive_channel_id',
    'parse_m3u',
    'current_program',
    'next_program',
    'DataSources',
    'build_sources',
]
