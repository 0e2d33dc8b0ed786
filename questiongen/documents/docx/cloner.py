"""Deep-copy a fragment table from a source package into a target package."""

from __future__ import annotations

import copy
from typing import Optional

from docx.opc.part import Part

from ...utils.debug import dbg, warn
from .layout import strip_legacy_shapes
from .media import RESOLVER_STRATEGIES, rebase_image, resolve_image_part
from .ns import A_BLIP, A_EXT_LST, R_EMBED, R_LINK, WP_DOC_PR, reference_attributes
from .package import Package, drop_reference


def _has_reference(el) -> bool:
    return isinstance(el.tag, str) and any(True for _ in reference_attributes(el))


def _detach_foreign_references(clone) -> int:
    """Drop every relationship reference in ``clone`` other than picture blips.

    References inside a blip's extension list (SVG sources, image layers) only
    cost the blip its ``a:extLst``; the blip itself is rebased afterwards.
    """
    detached = 0
    for blip in list(clone.iter(A_BLIP)):
        for ext_lst in blip.findall(A_EXT_LST):
            nested = sum(1 for el in ext_lst.iter() if _has_reference(el))
            if nested:
                blip.remove(ext_lst)
                detached += nested
    hits = [el for el in clone.iter() if el.tag != A_BLIP and _has_reference(el)]
    for el in hits:
        drop_reference(el)
    return detached + len(hits)


def _rebase_blips(clone, source: Package, target: Package, container: Optional[Part]) -> int:
    rebased = 0
    for blip in list(clone.iter(A_BLIP)):
        rId = blip.get(R_EMBED) or blip.get(R_LINK)
        image_part = resolve_image_part(source, container, rId, RESOLVER_STRATEGIES)
        new_rId = rebase_image(image_part, target) if image_part is not None else None
        if new_rId is None:
            if image_part is None:
                warn(f"Image reference {rId!r} could not be resolved; picture dropped")
            blip.getparent().remove(blip)
            continue
        blip.set(R_EMBED, new_rId)
        blip.attrib.pop(R_LINK, None)
        rebased += 1
    return rebased


def _renumber_drawings(clone, target: Package) -> None:
    for doc_pr in clone.iter(WP_DOC_PR):
        doc_pr.set("id", str(target.next_drawing_id()))


def clone_fragment(source_tbl, source: Package, target: Package, container: Optional[Part] = None):
    """Return a copy of ``source_tbl`` whose pictures live in ``target``.

    The source table is never modified.  Every picture in the copy points at a
    fresh media part in ``target`` (re-encoded to PNG unless it already was
    PNG or JPEG); pictures whose image cannot be found or decoded lose their
    blip.  Hyperlinks and other relationship references are detached, and
    legacy VML shapes are removed.
    """
    container = container if container is not None else source.main_part
    clone = copy.deepcopy(source_tbl)
    strip_legacy_shapes(clone)
    detached = _detach_foreign_references(clone)
    rebased = _rebase_blips(clone, source, target, container)
    _renumber_drawings(clone, target)
    if detached or rebased:
        dbg(f"cloned fragment: {rebased} image(s) rebased, {detached} reference(s) detached")
    return clone


__all__ = ["clone_fragment"]
