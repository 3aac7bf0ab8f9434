"""Tests for the metadata resolver."""

from pathlib import Path

import pytest
import yaml

from metaborg.core.exceptions import (
    FallbackError,
    MetadataReadError,
    SourceLookupError,
    TraversalError,
)
from metaborg.core.value import ROOT, Value
from metaborg.fs.sorter import Sorter
from metaborg.metadata import resolver as resolver_module
from metaborg.metadata.fallback import FallbackSpec, HarvestMethod
from metaborg.metadata.inherit import InheritMethod
from metaborg.metadata.plexer import UnusedBlockError
from metaborg.metadata.resolver import Direction, Resolver
from metaborg.stream.producer import is_error


class TestBlockFor:
    """Tests for finding an item's own block."""

    def test_item_from_external_list(self, resolver: Resolver, library: Path):
        """Track files are paired positionally with the list."""
        block = resolver.block_for(library / "ALBUM_01" / "02.flac")

        assert block["title"] == Value.string("Track Two")

    def test_item_from_external_mapping(self, resolver: Resolver, library: Path):
        """Track files are paired by name with the mapping."""
        block = resolver.block_for(library / "ALBUM_02" / "DISC_01" / "01.flac")

        assert block["title"] == Value.string("Disc Track One")

    def test_directory_from_internal(self, resolver: Resolver, library: Path):
        """Directories use their own self file."""
        block = resolver.block_for(library / "ALBUM_01")

        assert block["title"] == Value.string("Album One")

    def test_no_metadata(self, resolver: Resolver, library: Path):
        """Items without metadata have no block."""
        assert resolver.block_for(library / "ALBUM_02" / "DISC_01") is None

    def test_unreadable_file_is_recorded(self, tmp_path: Path, sourcer, selection):
        """A malformed metadata file is recorded and treated as missing."""
        (tmp_path / "self.yml").write_text("a: [unclosed\n")
        resolver = Resolver(sourcer, selection, Sorter(), boundary=tmp_path)

        assert resolver.block_for(tmp_path) is None
        assert len(resolver.diagnostics) == 1
        assert isinstance(next(iter(resolver.diagnostics)).error, MetadataReadError)

    def test_leftover_blocks_are_recorded(self, tmp_path: Path, sourcer, selection):
        """Blocks without items are recorded but the rest still resolve."""
        (tmp_path / "01.flac").write_text("")
        (tmp_path / "item.yml").write_text(yaml.safe_dump([{"title": "one"}, {"title": "extra"}]))
        resolver = Resolver(sourcer, selection, Sorter(), boundary=tmp_path)

        block = resolver.block_for(tmp_path / "01.flac")

        assert block == {"title": Value.string("one")}
        assert [type(d.error) for d in resolver.diagnostics] == [UnusedBlockError]


class TestAscend:
    """Tests for resolving up the hierarchy."""

    def test_parents_nearest_first(self, resolver: Resolver, library: Path):
        """Values are produced from the item outwards."""
        items = list(resolver.parents(library / "ALBUM_01", ["overridden"]))

        assert items == [Value.string("ALBUM_01_self"), Value.string("ROOT_self")]

    def test_overwrite(self, resolver: Resolver, library: Path):
        """The nearest value wins."""
        result = resolver.ascend(library / "ALBUM_01" / "01.flac", ["overridden"])

        assert result == Value.string("ALBUM_01_self")

    def test_inherited_from_root(self, resolver: Resolver, library: Path):
        """Values missing nearby are inherited."""
        result = resolver.ascend(library / "ALBUM_02" / "DISC_01" / "01.flac", ["genre"])

        assert result == Value.string("rock")

    def test_merge_mappings(self, resolver: Resolver, library: Path):
        """Merging unions mappings across levels."""
        result = resolver.ascend(library / "ALBUM_01", ["nested"], InheritMethod.MERGE)

        assert result == Value.from_raw({"album_key": "A", "root_key": "R"})

    def test_merge_value_under_sentinel(self, resolver: Resolver, library: Path):
        """An ancestor's plain value lands under the sentinel key."""
        result = resolver.ascend(library / "ALBUM_01", ["mixed"], InheritMethod.MERGE)

        assert result == Value.mapping({ROOT: Value.string("ROOT_value"), "sub": Value.string("A")})

    def test_not_found(self, resolver: Resolver, library: Path):
        """A key found nowhere resolves to null."""
        assert resolver.ascend(library / "ALBUM_01", ["missing"]) == Value.null()

    def test_fatal_error_is_raised(self, resolver: Resolver, library: Path):
        """An inaccessible origin is a fatal failure."""
        with pytest.raises(SourceLookupError) as exc_info:
            resolver.ascend(library / "missing.flac", ["title"])

        assert exc_info.value.fatal

    def test_permission_denied_is_raised(
        self, resolver: Resolver, library: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """A metadata file that cannot be opened aborts the walk."""
        locked = library / "ALBUM_01" / "self.yml"
        read_text = Path.read_text

        def deny(self, *args, **kwargs):
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            return read_text(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_text", deny)

        with pytest.raises(MetadataReadError) as exc_info:
            resolver.ascend(library / "ALBUM_01", ["title"])

        assert exc_info.value.fatal
        assert len(resolver.diagnostics) == 0


class TestDescend:
    """Tests for resolving down the hierarchy."""

    def test_children_delve_breadth_first(self, resolver: Resolver, library: Path):
        """Directories without a value are expanded in breadth-first order."""
        items = list(resolver.children(library, ["title"]))

        assert items == [
            Value.string("Album One"),
            Value.string("Disc Track One"),
            Value.string("Disc Track Two"),
        ]

    def test_values_on_files(self, resolver: Resolver, library: Path):
        """Values are found on files deeper in the tree."""
        items = list(resolver.children(library, ["duration"]))

        assert items == [Value.integer(100), Value.integer(200)]
        assert not any(is_error(i) for i in items)

    def test_origin_must_be_directory(self, resolver: Resolver, library: Path):
        """Descending from a file fails."""
        with pytest.raises(TraversalError):
            resolver.children(library / "ALBUM_01" / "01.flac", ["title"])

    def test_resolve_dispatches(self, resolver: Resolver, library: Path):
        """resolve ascends to a value or descends to a producer."""
        up = resolver.resolve(library / "ALBUM_01", ["genre"], Direction.ASCEND)
        down = resolver.resolve(library / "ALBUM_01", ["title"], Direction.DESCEND)

        assert up == Value.string("rock")
        assert list(down) == [Value.string("Track One"), Value.string("Track Two")]

    def test_dropped_children_read_nothing_more(
        self, resolver: Resolver, library: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """Metadata files are read only as far as the stream is pulled."""
        reads = []
        read_schema = resolver_module.read_schema

        def counting_read_schema(path, *args, **kwargs):
            reads.append(Path(path).relative_to(library))
            return read_schema(path, *args, **kwargs)

        monkeypatch.setattr(resolver_module, "read_schema", counting_read_schema)
        children = resolver.children(library, ["title"])

        assert children.pull() == Value.string("Album One")
        assert reads == [Path("ALBUM_01/self.yml")]

        assert children.pull() == Value.string("Disc Track One")
        assert reads == [
            Path("ALBUM_01/self.yml"),
            Path("ALBUM_02/self.yml"),
            Path("ALBUM_02/DISC_01/item.yml"),
        ]

    def test_grandchildren_listed_after_frontier(
        self, resolver: Resolver, library: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """A directory is listed only once the items queued before it are produced."""
        listed = []
        select = resolver.selection.select_in_dir_sorted

        def recording_select(dir_path, sorter):
            listed.append(Path(dir_path).relative_to(library))
            return select(dir_path, sorter)

        monkeypatch.setattr(resolver.selection, "select_in_dir_sorted", recording_select)
        children = resolver.children(library, ["title"])

        children.pull()
        assert listed == [Path(".")]

        children.pull()
        assert listed == [Path("."), Path("ALBUM_02"), Path("ALBUM_02/DISC_01")]


class TestFallbacks:
    """Tests for per-key fallback methods."""

    @pytest.fixture
    def configured(self, library: Path, sourcer, selection) -> Resolver:
        fallbacks = FallbackSpec.from_tree({
            "nested": "merge",
            "title": "first",
            "duration": "collect",
        })
        return Resolver(sourcer, selection, Sorter(), boundary=library, fallbacks=fallbacks)

    def test_unconfigured_key_uses_inherit_method(self, configured: Resolver, library: Path):
        """Keys without a fallback ascend with the default method."""
        assert configured.fallback_for(["genre"]) == InheritMethod.OVERWRITE
        assert configured.resolve(library / "ALBUM_01", ["overridden"]) == Value.string(
            "ALBUM_01_self"
        )

    def test_inherit_fallback_ascends(self, configured: Resolver, library: Path):
        """A configured inherit method is used when ascending."""
        result = configured.resolve(library / "ALBUM_01", ["nested"])

        assert result == Value.from_raw({"album_key": "A", "root_key": "R"})

    def test_harvest_fallback_descends(self, configured: Resolver, library: Path):
        """A configured harvest method reduces descendant values."""
        assert configured.resolve(library, ["title"]) == Value.string("Album One")
        assert configured.resolve(library, ["duration"]) == Value.from_raw([100, 200])

    def test_harvest_fallback_ignored_when_ascending(self, configured: Resolver, library: Path):
        """Ascending a harvested key uses the default inherit method instead."""
        result = configured.resolve(library / "ALBUM_01", ["title"], Direction.ASCEND)

        assert result == Value.string("Album One")

    def test_explicit_harvest_cannot_ascend(self, resolver: Resolver, library: Path):
        """An explicit harvest method with an explicit ascend is rejected."""
        with pytest.raises(FallbackError):
            resolver.resolve(library, ["title"], Direction.ASCEND, HarvestMethod.FIRST)

    def test_explicit_method_overrides_fallback(self, configured: Resolver, library: Path):
        """A method passed in wins over the configured one."""
        result = configured.resolve(library, ["title"], method=HarvestMethod.COLLECT)

        assert result == Value.from_raw(["Album One", "Disc Track One", "Disc Track Two"])

    def test_harvest_raises_walk_errors(self, resolver: Resolver, library: Path, monkeypatch):
        """A fatal failure while harvesting is raised."""
        def fail(path, *args, **kwargs):
            raise MetadataReadError(path, "Permission denied", fatal=True)

        monkeypatch.setattr(resolver_module, "read_schema", fail)

        with pytest.raises(MetadataReadError):
            resolver.harvest(library, ["title"], HarvestMethod.FIRST)
