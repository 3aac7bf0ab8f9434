"""Reading metadata files into schemas.

YAML and JSON numbers with fractional parts are read as exact
:class:`decimal.Decimal` values, never as floats. YAML timestamps are kept as
plain strings.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from metaborg.core.exceptions import MetadataReadError, ValueConversionError
from metaborg.metadata.schema import Schema, schema_from_raw
from metaborg.sources.source import Arity, MetaFormat


class DecimalSafeLoader(yaml.SafeLoader):
    """Safe YAML loader producing Decimals for floats and strings for dates."""


def _construct_decimal(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Decimal:
    text = loader.construct_scalar(node).replace("_", "")
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise yaml.constructor.ConstructorError(
            None, None, f"invalid decimal {text!r}", node.start_mark
        ) from e
    if not value.is_finite():
        raise yaml.constructor.ConstructorError(
            None, None, f"non-finite number {text!r} is not supported", node.start_mark
        )
    return value


DecimalSafeLoader.add_constructor("tag:yaml.org,2002:float", _construct_decimal)
DecimalSafeLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", yaml.SafeLoader.construct_yaml_str
)


def parse_text(text: str, fmt: MetaFormat) -> Any:
    """Parse document text into plain Python data.

    Raises:
        ValueError: On malformed JSON.
        yaml.YAMLError: On malformed YAML.
    """
    if fmt == MetaFormat.JSON:
        return json.loads(text, parse_float=Decimal)
    return yaml.load(text, Loader=DecimalSafeLoader)


def read_schema(path: Path | str, arity: Arity, fmt: MetaFormat | None = None) -> Schema:
    """Read a metadata file.

    Args:
        path: Path to the metadata file.
        arity: Expected number of blocks.
        fmt: Serialization format; inferred from the extension if omitted.

    Returns:
        Parsed schema.

    Raises:
        MetadataReadError: If the file cannot be read or parsed, or has the
            wrong shape. Only access failures other than a missing file
            are marked fatal.
    """
    path = Path(path)
    fmt = fmt or MetaFormat.from_path(path)
    logger.debug(f"Reading {fmt.value} metadata file: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (FileNotFoundError, UnicodeDecodeError) as e:
        raise MetadataReadError(path, str(e)) from e
    except OSError as e:
        raise MetadataReadError(path, str(e), fatal=True) from e

    try:
        raw = parse_text(text, fmt)
    except (ValueError, yaml.YAMLError) as e:
        raise MetadataReadError(path, f"malformed {fmt.value}: {e}") from e

    try:
        return schema_from_raw(raw, arity)
    except ValueConversionError as e:
        raise MetadataReadError(path, str(e)) from e
