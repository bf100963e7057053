from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from lxml import etree  # type: ignore

from ..exceptions import ParseError

ROOT_TAG = "mysqldump"

# -----------------------------
# Document model
# -----------------------------

@dataclass(frozen=True)
class Field:
    name: str
    text: str


@dataclass(frozen=True)
class Row:
    fields: Tuple[Field, ...] = ()

    def get(self, name: str) -> Optional[Field]:
        """First field called <name>; later duplicates are ignored."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def unique(self) -> Iterator[Field]:
        """Fields in document order, keeping only the first of each name."""
        seen = set()
        for field in self.fields:
            if field.name not in seen:
                seen.add(field.name)
                yield field


@dataclass(frozen=True)
class Table:
    name: str
    rows: Tuple[Row, ...] = ()


@dataclass(frozen=True)
class Database:
    name: str = ""
    tables: Tuple[Table, ...] = ()


@dataclass(frozen=True)
class Document:
    database: Database = Database()

# -----------------------------
# Helpers
# -----------------------------

def _xml_parser() -> etree.XMLParser:
    # the device is remote and untrusted: no DTD entities, no network lookups
    return etree.XMLParser(resolve_entities=False, no_network=True)

def _attr(node: etree._Element, name: str) -> str:
    return node.get(name) or ""

def _txt(node: etree._Element) -> str:
    return node.text or ""

def _children(node: etree._Element, tag: str):
    return (child for child in node if child.tag == tag)

def _parse_row(node: etree._Element) -> Row:
    return Row(tuple(Field(_attr(f, "name"), _txt(f)) for f in _children(node, "field")))

def _parse_table(node: etree._Element) -> Table:
    return Table(_attr(node, "name"), tuple(_parse_row(r) for r in _children(node, "row")))

# -----------------------------
# Public API
# -----------------------------

def parse_document(body: bytes) -> Document:
    """Parse a Sansay `mysqldump` XML body into a read-only Document tree.

    Only `database/table/row/field` is looked at; any other tag is ignored.
    Raises ParseError when the body is not well-formed XML or its root is
    not <mysqldump>.
    """
    try:
        root = etree.fromstring(body, parser=_xml_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise ParseError(f"malformed XML: {exc}") from exc

    if root.tag != ROOT_TAG:
        raise ParseError(f"expected element <{ROOT_TAG}> but have <{root.tag}>")

    db = root.find("database")
    if db is None:
        return Document()
    tables = tuple(_parse_table(t) for t in _children(db, "table"))
    return Document(Database(_attr(db, "name"), tables))
