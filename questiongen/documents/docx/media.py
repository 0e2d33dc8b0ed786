"""Media resolution and re-encoding for cloned fragments.

A picture inside a fragment names its image by relationship id, but the part
that physically holds that relationship is not always the fragment's own
container.  ``RESOLVER_STRATEGIES`` lists the places to look, in order; the
first strategy that finds an image part wins.
"""

from __future__ import annotations

import io
from typing import Callable, Optional, Sequence, Tuple

from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.part import Part
from docx.parts.image import ImagePart
from PIL import Image

from ...utils.debug import dbg, warn
from .package import Package

CANONICAL_CONTENT_TYPES = ("image/png", "image/jpeg")
_CONTENT_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}
_PNG_SAFE_MODES = {"1", "L", "LA", "I", "P", "RGB", "RGBA"}

ResolverStrategy = Callable[[Package, Optional[Part], str], Optional[Part]]


def _is_image_part(part: Part) -> bool:
    return isinstance(part, ImagePart) or (part.content_type or "").lower().startswith("image/")


def _image_target(part: Optional[Part], rId: str) -> Optional[Part]:
    if part is None:
        return None
    rel = part.rels.get(rId)
    if rel is None or rel.is_external:
        return None
    target = rel.target_part
    return target if _is_image_part(target) else None


# ── Resolver strategies -------------------------------------------------------


def from_container(package: Package, container: Optional[Part], rId: str) -> Optional[Part]:
    return _image_target(container, rId)


def from_main_part(package: Package, container: Optional[Part], rId: str) -> Optional[Part]:
    return _image_target(package.main_part, rId)


def from_related_collections(package: Package, container: Optional[Part], rId: str) -> Optional[Part]:
    """Headers, footers, charts and media parts hanging off the main part."""
    for part in package.related_parts(RT.HEADER, RT.FOOTER, RT.CHART, RT.IMAGE):
        found = _image_target(part, rId)
        if found is not None:
            return found
    return None


def from_identity_scan(package: Package, container: Optional[Part], rId: str) -> Optional[Part]:
    """Last resort: any part in the package relating ``rId`` to an image."""
    for part in package.iter_parts():
        found = _image_target(part, rId)
        if found is not None:
            return found
    return None


RESOLVER_STRATEGIES: Sequence[Tuple[str, ResolverStrategy]] = (
    ("container", from_container),
    ("main-part", from_main_part),
    ("related-collections", from_related_collections),
    ("identity-scan", from_identity_scan),
)


def resolve_image_part(
    package: Package,
    container: Optional[Part],
    rId: Optional[str],
    strategies: Sequence[Tuple[str, ResolverStrategy]] = RESOLVER_STRATEGIES,
) -> Optional[Part]:
    if not rId:
        return None
    for name, strategy in strategies:
        part = strategy(package, container, rId)
        if part is not None:
            if name != "container":
                dbg(f"resolved {rId} via {name} -> {part.partname}")
            return part
    return None


# ── Re-encoding -----------------------------------------------------------------


def canonical_content_type(content_type: Optional[str]) -> str:
    """Map any content type onto PNG or JPEG; unknown types become PNG."""
    ct = (content_type or "").strip().lower()
    ct = _CONTENT_TYPE_ALIASES.get(ct, ct)
    return ct if ct in CANONICAL_CONTENT_TYPES else "image/png"


def canonicalize_image(blob: bytes, content_type: Optional[str]) -> Tuple[bytes, str]:
    """Pass PNG/JPEG through untouched, decode anything else and re-encode as PNG.

    Raises ``OSError``/``ValueError`` when Pillow cannot decode the blob.
    """
    source = (content_type or "").strip().lower()
    source = _CONTENT_TYPE_ALIASES.get(source, source)
    if canonical_content_type(source) == source:
        return blob, source
    with Image.open(io.BytesIO(blob)) as img:
        img.load()
        frame = img if img.mode in _PNG_SAFE_MODES else img.convert("RGBA")
        out = io.BytesIO()
        frame.save(out, format="PNG")
    dbg(f"re-encoded {source or 'unknown'} media as image/png")
    return out.getvalue(), "image/png"


def rebase_image(source_part: Part, target: Package) -> Optional[str]:
    """Copy ``source_part`` into ``target`` as a canonical media part.

    Returns the new relationship id, or ``None`` when the image cannot be decoded.
    """
    try:
        blob, content_type = canonicalize_image(source_part.blob, source_part.content_type)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        warn(f"Could not re-encode {source_part.partname} ({source_part.content_type}): {exc}")
        return None
    return target.add_media(blob, content_type)


__all__ = [
    "CANONICAL_CONTENT_TYPES",
    "RESOLVER_STRATEGIES",
    "canonical_content_type",
    "canonicalize_image",
    "from_container",
    "from_identity_scan",
    "from_main_part",
    "from_related_collections",
    "rebase_image",
    "resolve_image_part",
]
