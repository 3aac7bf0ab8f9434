"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
import yaml

from metaborg.fs.selection import Selection
from metaborg.fs.sorter import Sorter
from metaborg.metadata.resolver import Resolver
from metaborg.sources import Anchor, Source, Sourcer


def write_yaml(path: Path, data) -> Path:
    """Write data as a YAML file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Provide a small music library tree.

    ROOT/
        self.yml
        ALBUM_01/
            self.yml
            item.yml        (list: 01.flac, 02.flac)
            01.flac
            02.flac
        ALBUM_02/
            self.yml
            DISC_01/
                item.yml    (map: 01.flac, 02.flac)
                01.flac
                02.flac
    """
    root = tmp_path / "ROOT"

    write_yaml(root / "self.yml", {
        "overridden": "ROOT_self",
        "genre": "rock",
        "nested": {"root_key": "R"},
        "mixed": "ROOT_value",
    })

    album_01 = root / "ALBUM_01"
    write_yaml(album_01 / "self.yml", {
        "overridden": "ALBUM_01_self",
        "title": "Album One",
        "nested": {"album_key": "A"},
        "mixed": {"sub": "A"},
    })
    write_yaml(album_01 / "item.yml", [
        {"title": "Track One", "duration": 100, "rating": 4.5},
        {"title": "Track Two", "duration": 200, "rating": 3},
    ])
    (album_01 / "01.flac").write_bytes(b"")
    (album_01 / "02.flac").write_bytes(b"")

    album_02 = root / "ALBUM_02"
    write_yaml(album_02 / "self.yml", {"overridden": "ALBUM_02_self"})
    disc_01 = album_02 / "DISC_01"
    write_yaml(disc_01 / "item.yml", {
        "01.flac": {"title": "Disc Track One"},
        "02.flac": {"title": "Disc Track Two"},
    })
    (disc_01 / "01.flac").write_bytes(b"")
    (disc_01 / "02.flac").write_bytes(b"")

    return root


@pytest.fixture
def sourcer() -> Sourcer:
    """Provide the standard item/self sources."""
    return Sourcer([
        Source("item.yml", Anchor.EXTERNAL),
        Source("self.yml", Anchor.INTERNAL),
    ])


@pytest.fixture
def selection() -> Selection:
    """Provide a selection that skips metadata files."""
    return Selection.from_patterns(exclude_files=["item.yml", "self.yml"])


@pytest.fixture
def resolver(library: Path, sourcer: Sourcer, selection: Selection) -> Resolver:
    """Provide a resolver bounded at the library root."""
    return Resolver(sourcer, selection, Sorter(), boundary=library)
