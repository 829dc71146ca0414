# mp3repair
# Reconcile an artist/album/track directory tree with embedded ID3 tags

__version__ = "0.3.0"
__build_timestamp__ = "2026-10-19T09:30:00Z"

APP_NAME = "mp3repair"

__all__ = [
    'APP_NAME',
    '__version__',
    '__build_timestamp__',
]
