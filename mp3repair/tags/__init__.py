# Tag Codec
# ID3V1 trailer reader and ID3V2 reader/writer

from .id3v1 import Id3v1Metadata, read_id3v1
from .id3v2 import (
    TagData,
    read_tag_data,
    update_metadata,
    describe_id3v2,
    read_details,
)

__all__ = [
    'Id3v1Metadata',
    'read_id3v1',
    'TagData',
    'read_tag_data',
    'update_metadata',
    'describe_id3v2',
    'read_details',
]
