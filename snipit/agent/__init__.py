from .metadata import (
    MetadataCollector,
    MetadataCompleter,
    MetadataFailure,
    MetadataFailureReason,
    SnippetMetadata,
)

__all__ = [
    "MetadataCollector",
    "MetadataCompleter",
    "MetadataFailure",
    "MetadataFailureReason",
    "SnippetMetadata",
]
