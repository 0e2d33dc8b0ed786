"""In-memory compound-document package built on python-docx's OPC layer.

A ``Package`` wraps one ``docx.Document`` and keeps three things consistent:

* the XML part tree (main document, headers/footers, styles, settings),
* the binary media parts,
* the relationship graph, i.e. for every part the map ``rId -> target``.

Every structural edit goes through this class so that adding media also adds
the relationship, and removing a relationship also removes every in-content
reference that names it.  Saving prunes anything left dangling and publishes
the file atomically.
"""

from __future__ import annotations

import itertools
import os
import tempfile
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

import docx
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.exceptions import PackageNotFoundError as DocxPackageNotFoundError
from docx.opc.part import Part, XmlPart
from docx.parts.image import ImagePart
from lxml import etree

from ...exceptions import (
    MalformedPackageError,
    PackageNotFoundError,
    PackageSaveError,
    PackageValidationError,
)
from ...utils.debug import dbg
from .ns import (
    A_BLIP,
    W_DRAWING,
    W_HYPERLINK,
    W_TBL,
    WP_DOC_PR,
    clark,
    reference_attributes,
)

PathLike = Union[str, os.PathLike]

MEDIA_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
}

# References that can go on their own without invalidating the enclosing drawing.
_DETACHABLE_REFERENCES = {A_BLIP, clark("a:hlinkClick"), clark("a:hlinkHover")}


@dataclass(frozen=True)
class RelationshipRecord:
    """One edge of the relationship graph, detached from python-docx objects."""

    rId: str
    reltype: str
    target: str
    is_external: bool


class Package:
    """A word-processing package held fully in memory."""

    def __init__(self, document, path: Optional[PathLike] = None) -> None:
        self.document = document
        self.path: Optional[Path] = Path(path) if path is not None else None
        self._drawing_ids: Optional[Iterator[int]] = None

    # ── Construction ------------------------------------------------------

    @classmethod
    def open(cls, path: PathLike) -> "Package":
        source = Path(path)
        if not source.is_file():
            raise PackageNotFoundError(f"Package not found at '{source}'")
        try:
            document = docx.Document(str(source))
        except (
            DocxPackageNotFoundError,
            zipfile.BadZipFile,
            KeyError,
            ValueError,
            etree.XMLSyntaxError,
        ) as exc:
            raise MalformedPackageError(f"'{source}' is not a readable .docx package: {exc}") from exc
        dbg(f"opened package {source.name}")
        return cls(document, path=source)

    @classmethod
    def create_empty(cls, path: Optional[PathLike] = None) -> "Package":
        """Return a package whose body has no content, not even section properties."""
        document = docx.Document()
        body = document.element.body
        for child in list(body):
            body.remove(child)
        document.core_properties.created = datetime.now(timezone.utc)
        return cls(document, path=path)

    # ── Accessors ---------------------------------------------------------

    @property
    def main_part(self):
        return self.document.part

    @property
    def opc(self):
        return self.document.part.package

    @property
    def body(self):
        return self.document.element.body

    def fragments(self) -> List:
        """Top-level tables of the body, in document order."""
        return [child for child in self.body if child.tag == W_TBL]

    def iter_parts(self) -> Iterator[Part]:
        return self.opc.iter_parts()

    def iter_xml_parts(self) -> Iterator[XmlPart]:
        for part in self.iter_parts():
            if isinstance(part, XmlPart):
                yield part

    def related_parts(self, *reltypes: str, source: Optional[Part] = None) -> List[Part]:
        """Internal targets of ``source`` (default: main part) with one of ``reltypes``."""
        source = source if source is not None else self.main_part
        return [
            rel.target_part
            for rel in source.rels.values()
            if not rel.is_external and rel.reltype in reltypes
        ]

    def header_footer_parts(self) -> List[Part]:
        return self.related_parts(RT.HEADER, RT.FOOTER)

    def relationship_graph(self) -> Dict[str, Dict[str, RelationshipRecord]]:
        """Adjacency map ``{partname: {rId: RelationshipRecord}}`` for every part."""
        graph: Dict[str, Dict[str, RelationshipRecord]] = {}
        for part in self.iter_parts():
            graph[str(part.partname)] = {rId: _record(rId, rel) for rId, rel in part.rels.items()}
        return graph

    # ── Mutation ----------------------------------------------------------

    def add_media(self, blob: bytes, content_type: str) -> str:
        """Store ``blob`` as a new media part related from the main part; return its rId."""
        ext = MEDIA_EXTENSIONS.get(content_type)
        if ext is None:
            raise ValueError(f"Unsupported media content type: {content_type}")
        partname = self.opc.next_partname(f"/word/media/image%d.{ext}")
        image_part = ImagePart.load(partname, content_type, blob, self.opc)
        # python-docx numbers its own image parts from this collection
        self.opc.image_parts.append(image_part)
        return self.main_part.relate_to(image_part, RT.IMAGE)

    def drop_relationship(self, part: Part, rId: str) -> int:
        """Remove relationship ``rId`` from ``part`` and every reference to it.

        Returns the number of in-content references removed.
        """
        rels = part.rels
        if rId not in rels:
            return 0
        rels.pop(rId)
        getattr(rels, "_target_parts_by_rId", {}).pop(rId, None)
        if isinstance(part, XmlPart):
            return drop_references(part.element, {rId})
        return 0

    def remove_part(self, target: Part) -> int:
        """Detach ``target`` from every part (and the package) that relates to it."""
        removed = 0
        for part in list(self.iter_parts()):
            for rId, rel in list(part.rels.items()):
                if not rel.is_external and rel.target_part is target:
                    removed += self.drop_relationship(part, rId)
        for rId, rel in list(self.opc.rels.items()):
            if not rel.is_external and rel.target_part is target:
                self.opc.rels.pop(rId)
        image_parts = getattr(self.opc.image_parts, "_image_parts", None)
        if image_parts is not None and target in image_parts:
            image_parts.remove(target)
        return removed

    def next_drawing_id(self) -> int:
        """Hand out drawing ids that are unique within the main document part."""
        if self._drawing_ids is None:
            used = [
                int(value)
                for value in (el.get("id") for el in self.main_part.element.iter(WP_DOC_PR))
                if value and value.isdigit()
            ]
            self._drawing_ids = itertools.count(max(used, default=0) + 1)
        return next(self._drawing_ids)

    def prune_dangling_references(self) -> int:
        """Drop in-content references whose rId has no relationship in its part."""
        total = 0
        for part in self.iter_xml_parts():
            known = set(part.rels.keys())
            dangling: Set[str] = {
                value
                for el in part.element.iter(etree.Element)
                for _, value in reference_attributes(el)
                if value not in known
            }
            if dangling:
                count = drop_references(part.element, dangling)
                dbg(f"pruned {count} dangling reference(s) from {part.partname}")
                total += count
        return total

    # ── Persistence -------------------------------------------------------

    def save(self, path: Optional[PathLike] = None) -> Path:
        """Write the package to ``path`` via a temporary sibling and an atomic rename."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise PackageSaveError("No output path given for package")
        if self.body is None:
            raise PackageValidationError("Package has no main document body")

        self.prune_dangling_references()
        tmp: Optional[str] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
            os.close(fd)
            self.document.save(tmp)
            os.replace(tmp, target)
        except OSError as exc:
            raise PackageSaveError(f"Failed to write package '{target}': {exc}") from exc
        finally:
            if tmp is not None and os.path.exists(tmp):
                os.unlink(tmp)
        self.path = target
        dbg(f"saved package {target.name}")
        return target


# ── Reference helpers ------------------------------------------------------


def _record(rId: str, rel) -> RelationshipRecord:
    if rel.is_external:
        target = rel.target_ref
    else:
        target = str(rel.target_part.partname)
    return RelationshipRecord(rId=rId, reltype=rel.reltype, target=target, is_external=rel.is_external)


def _enclosing(element, tag: str):
    for ancestor in element.iterancestors(tag):
        return ancestor
    return None


def _unwrap(element) -> None:
    parent = element.getparent()
    index = parent.index(element)
    for child in list(element):
        parent.insert(index, child)
        index += 1
    parent.remove(element)


def drop_reference(element) -> None:
    """Remove one referencing element without leaving broken structure behind.

    Hyperlinks keep their runs; pictures lose only their blip; anything else
    inside a drawing takes the whole drawing with it.
    """
    parent = element.getparent()
    if parent is None:
        return
    if element.tag == W_HYPERLINK:
        _unwrap(element)
        return
    if element.tag in _DETACHABLE_REFERENCES:
        parent.remove(element)
        return
    drawing = _enclosing(element, W_DRAWING)
    victim = drawing if drawing is not None else element
    if victim.getparent() is not None:
        victim.getparent().remove(victim)


def drop_references(root, rIds: Iterable[str]) -> int:
    """Apply ``drop_reference`` to every element under ``root`` naming one of ``rIds``."""
    wanted = set(rIds)
    hits = [
        el
        for el in root.iter(etree.Element)
        if any(value in wanted for _, value in reference_attributes(el))
    ]
    for el in hits:
        drop_reference(el)
    return len(hits)


__all__ = [
    "MEDIA_EXTENSIONS",
    "Package",
    "RelationshipRecord",
    "drop_reference",
    "drop_references",
]
