"""Metadata documents and hierarchical resolution.

Schemas and reading:
- OneSchema, SeqSchema, MapSchema: shapes of parsed metadata documents
- read_schema: read a YAML/JSON metadata file

Plexing:
- plex: pair schema blocks with item paths

Resolution:
- InheritMethod, merge, overwrite: combining values across levels
- HarvestMethod, FallbackSpec, parse_fallback: per-key fallback methods
- Resolver, Direction: ascend/descend resolution of key paths
- Diagnostics: non-fatal failures met while resolving
"""

from metaborg.metadata.fallback import Fallback, FallbackSpec, HarvestMethod, parse_fallback
from metaborg.metadata.inherit import InheritMethod, merge, overwrite
from metaborg.metadata.plexer import (
    NamelessItemPathError,
    UnusedBlockError,
    UnusedItemPathError,
    plex,
)
from metaborg.metadata.reader import read_schema
from metaborg.metadata.resolver import Diagnostic, Diagnostics, Direction, Resolver
from metaborg.metadata.schema import (
    Block,
    MapSchema,
    OneSchema,
    Schema,
    SeqSchema,
    get_key_path,
    schema_from_raw,
)

__all__ = [
    # Schemas and reading
    "Block",
    "Schema",
    "OneSchema",
    "SeqSchema",
    "MapSchema",
    "schema_from_raw",
    "get_key_path",
    "read_schema",
    # Plexing
    "plex",
    "UnusedItemPathError",
    "UnusedBlockError",
    "NamelessItemPathError",
    # Resolution
    "InheritMethod",
    "merge",
    "overwrite",
    "Fallback",
    "FallbackSpec",
    "HarvestMethod",
    "parse_fallback",
    "Resolver",
    "Direction",
    "Diagnostic",
    "Diagnostics",
]
