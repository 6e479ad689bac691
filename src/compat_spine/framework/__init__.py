"""
compat-spine framework - collaborators around the domain core.

This package provides:
- Feature sources (cppreference page scraper, JSON fixture files)
- Delivery sinks (console, webhook) with operator escalation

Import from the subpackages directly:
    from compat_spine.framework.sources import CppReferenceSource
    from compat_spine.framework.delivery import create_sink
"""
