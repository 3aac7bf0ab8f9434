"""metaborg - hierarchical file metadata resolution and querying.

Items in a directory tree carry metadata in YAML or JSON files: a "self"
file inside a directory describes the directory, an "item" file next to
items describes each of them. metaborg resolves values up and down the tree
and evaluates small stack-based queries over lazy value streams.

Quick Start
-----------
    from metaborg import Config, Direction, evaluate, parse_tokens

    resolver = Config.from_env().build_resolver()
    artist = resolver.resolve(track, ["artist"], Direction.ASCEND)
    total = evaluate(parse_tokens([{"$children": ["duration"]}, "$sum"]), album, resolver)
"""

from metaborg.core import MetaborgError, Number, Value, ValueKind
from metaborg.core.config import Config
from metaborg.metadata import Diagnostics, Direction, HarvestMethod, InheritMethod, Resolver
from metaborg.query import evaluate, parse_tokens

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Diagnostics",
    "Direction",
    "HarvestMethod",
    "InheritMethod",
    "MetaborgError",
    "Number",
    "Resolver",
    "Value",
    "ValueKind",
    "evaluate",
    "parse_tokens",
]
