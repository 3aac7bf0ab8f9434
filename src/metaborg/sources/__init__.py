"""Metadata file sources.

A source names a metadata file and its anchor; a sourcer tries an ordered
list of sources to find the metadata file describing an item:

    sourcer = Sourcer([
        Source("item.yml", Anchor.EXTERNAL),
        Source("self.yml", Anchor.INTERNAL),
    ])
    found = sourcer.meta_path(Path("/music/album/01.flac"))
"""

from metaborg.sources.source import Anchor, Arity, MetaFormat, Source, Sourcer

__all__ = [
    "Anchor",
    "Arity",
    "MetaFormat",
    "Source",
    "Sourcer",
]
