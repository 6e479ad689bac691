"""
compat-spine: C++ compiler support change watcher.

Tracks the published compiler-support matrix as an append-only history,
classifies each change and turns it into a short report.
"""

__version__ = "0.1.0"
