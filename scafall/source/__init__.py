"""Template sources: where a skeleton is read from.

Quick usage::

    from scafall.source import SourceFetcher

    source = await SourceFetcher().fetch("https://github.com/org/templates")
    try:
        for entry in source.entries():
            ...
    finally:
        source.close()
"""

from scafall.source.fetcher import SourceFetcher, select_sub_path
from scafall.source.tree import ClonedSource, DirectorySource, SourceEntry, TemplateSource

__all__ = [
    "ClonedSource",
    "DirectorySource",
    "SourceEntry",
    "SourceFetcher",
    "TemplateSource",
    "select_sub_path",
]
