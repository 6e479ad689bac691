"""
Feature source package.

Provides the producer protocol and its two implementations.
"""

from compat_spine.framework.sources.cppreference import CppReferenceSource, parse_compiler_support
from compat_spine.framework.sources.factory import create_source
from compat_spine.framework.sources.file import JsonFileSource, parse_feature_document
from compat_spine.framework.sources.protocol import FeatureRecord, FeatureSource

__all__ = [
    # Types
    "FeatureRecord",
    # Protocol
    "FeatureSource",
    # Implementations
    "CppReferenceSource",
    "JsonFileSource",
    # Factory / parsers
    "create_source",
    "parse_compiler_support",
    "parse_feature_document",
]
