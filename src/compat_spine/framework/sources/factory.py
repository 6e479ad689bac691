"""Build the configured feature source from settings."""

from __future__ import annotations

from compat_spine.core.errors import InvalidConfigError
from compat_spine.core.settings import CompatSettings
from compat_spine.framework.sources.cppreference import CppReferenceSource
from compat_spine.framework.sources.file import JsonFileSource
from compat_spine.framework.sources.protocol import FeatureSource


def create_source(settings: CompatSettings) -> FeatureSource:
    """Create the source selected by ``settings.source``.

    Raises:
        InvalidConfigError: file source selected without ``source_file``.
    """
    if settings.source == "file":
        if settings.source_file is None:
            raise InvalidConfigError("file source requires source_file", key="source_file")
        return JsonFileSource(settings.source_file)
    return CppReferenceSource(settings.source_url, timeout=settings.http_timeout_seconds)


__all__ = ["create_source"]
