"""End-to-end resolution and querying over a library tree."""

from pathlib import Path

import pytest

from metaborg import Config, Direction, InheritMethod, Value, evaluate, parse_tokens
from metaborg.core.value import ROOT
from metaborg.metadata.resolver import Resolver


@pytest.fixture
def configured(library: Path) -> Resolver:
    """A resolver built from default configuration."""
    return Config(boundary=library).build_resolver()


class TestResolution:
    """Resolving key paths through a configured resolver."""

    def test_overwrite(self, configured: Resolver, library: Path):
        """The nearest level's value wins."""
        result = configured.resolve(library / "ALBUM_01", ["overridden"], Direction.ASCEND)

        assert result == Value.string("ALBUM_01_self")

    def test_merge(self, configured: Resolver, library: Path):
        """Merging keeps values from every level."""
        album = library / "ALBUM_01"

        mixed = configured.resolve(album, ["mixed"], Direction.ASCEND, InheritMethod.MERGE)
        nested = configured.resolve(album, ["nested"], Direction.ASCEND, InheritMethod.MERGE)

        assert mixed == Value.mapping({ROOT: Value.string("ROOT_value"), "sub": Value.string("A")})
        assert nested == Value.from_raw({"album_key": "A", "root_key": "R"})

    def test_descend(self, configured: Resolver, library: Path):
        """Descending finds the nearest values under each child."""
        items = list(configured.resolve(library, ["title"], Direction.DESCEND))

        assert items == [
            Value.string("Album One"),
            Value.string("Disc Track One"),
            Value.string("Disc Track Two"),
        ]
        assert len(configured.diagnostics) == 0

    def test_configured_fallbacks(self, library: Path):
        """Per-key fallbacks pick the direction and method."""
        config = Config(boundary=library, fallbacks={"title": "first", "nested": "merge"})
        resolver = config.build_resolver()

        assert resolver.resolve(library, ["title"]) == Value.string("Album One")
        assert resolver.resolve(library / "ALBUM_01", ["nested"]) == Value.from_raw(
            {"album_key": "A", "root_key": "R"}
        )


class TestQueries:
    """Evaluating queries against a library."""

    def test_total_duration(self, configured: Resolver, library: Path):
        """Sum of track durations below the root."""
        tokens = parse_tokens([{"$children": ["duration"]}, "$sum"])

        assert evaluate(tokens, library, configured) == Value.integer(300)

    def test_mean_rating(self, configured: Resolver, library: Path):
        """Arithmetic over decimal and integer metadata."""
        tokens = parse_tokens([
            {"$children": ["rating"]}, "$sum",
            {"$children": ["rating"]}, "$count",
            "$div",
        ])

        assert evaluate(tokens, library / "ALBUM_01", configured) == Value.decimal("3.75")

    def test_parents_collected(self, configured: Resolver, library: Path):
        """A source left on the stack is collected into a sequence."""
        tokens = parse_tokens([{"$parents": ["overridden"]}])

        result = evaluate(tokens, library / "ALBUM_01" / "01.flac", configured)

        assert result == Value.from_raw(["ALBUM_01_self", "ROOT_self"])

    def test_filtered_titles(self, configured: Resolver, library: Path):
        """Higher-order operators over a lazy source."""
        tokens = parse_tokens([
            {"$children": ["title"]},
            {"$&ne": "Album One"}, "$filter",
            "$count",
        ])

        assert evaluate(tokens, library, configured) == Value.integer(2)
