"""
Entity metadata: descriptor tables, the process-wide registry and value codecs.
"""

from .codecs import Codec, CodecRegistry, default_codecs
from .descriptors import AttributeMetadata, EntityMetadata, IdentifierMetadata
from .errors import MappingError
from .processor import EntityMetadataProcessor
from .registry import MetadataRegistry, metadata_registry

__all__ = [
    "AttributeMetadata",
    "Codec",
    "CodecRegistry",
    "EntityMetadata",
    "EntityMetadataProcessor",
    "IdentifierMetadata",
    "MappingError",
    "MetadataRegistry",
    "default_codecs",
    "metadata_registry",
]
