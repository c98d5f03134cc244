"""Reading components and requirements from files.

Components come from CSV (header row, one component per row) or JSON (a
list, or an object with a ``components`` list).  Requirements come from
JSON or TOML.  Header spellings common in BOM exports (``Part No``,
``Qty``, ``Specs`` …) are normalised to model field names.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from smartbom.exceptions import InputError
from smartbom.models import Component, Requirements

logger = logging.getLogger(__name__)

_HEADER_ALIASES: dict[str, str] = {
    "name": "name",
    "partname": "name",
    "component": "name",
    "componentname": "name",
    "item": "name",
    "partnumber": "part_number",
    "partno": "part_number",
    "pn": "part_number",
    "mpn": "part_number",
    "description": "description",
    "desc": "description",
    "specifications": "specifications",
    "specification": "specifications",
    "specs": "specifications",
    "quantity": "quantity",
    "qty": "quantity",
}


def _normalise_header(header: str) -> str | None:
    key = re.sub(r"[^a-z]", "", header.lower())
    return _HEADER_ALIASES.get(key)


def _parse_quantity(value: Any, row: int) -> int:
    if value in (None, ""):
        return 1
    try:
        return int(float(value))
    except (TypeError, ValueError):
        raise InputError(f"Row {row}: invalid quantity {value!r}") from None


def components_from_rows(rows: Iterable[dict[str, Any]]) -> list[Component]:
    """Build components from dict rows keyed by (possibly messy) headers.

    Rows whose values are all empty are skipped.

    Raises:
        InputError: If a row has no component name or an invalid value.
    """
    components: list[Component] = []
    for row_number, raw in enumerate(rows, start=1):
        if not any(str(v).strip() for v in raw.values() if v is not None):
            continue
        data: dict[str, Any] = {}
        for header, value in raw.items():
            field = _normalise_header(str(header)) if header is not None else None
            if field is not None and field not in data:
                data[field] = value.strip() if isinstance(value, str) else value
        if not data.get("name"):
            raise InputError(f"Row {row_number}: missing component name")
        data["quantity"] = _parse_quantity(data.get("quantity"), row_number)
        if data.get("part_number") == "":
            data["part_number"] = None
        try:
            components.append(Component(**data))
        except ValidationError as exc:
            raise InputError(f"Row {row_number}: {exc}") from exc
    return components


def parse_csv(text: str) -> list[Component]:
    """Parse CSV text with a header row into components."""
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise InputError("No data found in CSV input")
    return components_from_rows(reader)


def load_components(path: Path) -> list[Component]:
    """Load components from a ``.csv`` or ``.json`` file.

    Raises:
        InputError: If the file is missing, of an unsupported type, or invalid.
    """
    if not path.exists():
        raise InputError(f"Input file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".json"):
        raise InputError(f"Unsupported file type: {suffix or '(none)'}")
    text = path.read_text(encoding="utf-8-sig")

    if suffix == ".csv":
        components = parse_csv(text)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InputError(f"Invalid JSON in {path}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("components", [])
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise InputError(f"{path} must contain a list of component objects")
        components = components_from_rows(data)

    logger.info("Loaded %d component(s) from %s", len(components), path)
    return components


def load_requirements(path: Path | None) -> Requirements:
    """Load sourcing requirements from JSON or TOML; defaults when *path* is None."""
    if path is None:
        return Requirements()
    if not path.exists():
        raise InputError(f"Requirements file not found: {path}")
    try:
        if path.suffix.lower() == ".toml":
            with open(path, "rb") as fh:
                data = tomllib.load(fh)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
        return Requirements.model_validate(data)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, ValidationError) as exc:
        raise InputError(f"Invalid requirements file {path}: {exc}") from exc
