"""
DrawingML builders for pictures.

Creates ``w:drawing`` subtrees for inline and floating (anchored)
images. Drawing ids come from the caller so they stay unique across
the whole document.
"""

import logging
import xml.etree.ElementTree as ET

from ..constants import ANCHOR_DISTANCE, NAMESPACE_PREFIXES
from ..models.image import HorizontalAlign, Image, TextWrapType, VerticalAlign

logger = logging.getLogger(__name__)

PICTURE_URI = "http://schemas.openxmlformats.org/drawingml/2006/picture"

# 21600 is the fixed coordinate space of wrap polygons
WRAP_POLYGON = ((0, 0), (0, 21600), (21600, 21600), (21600, 0), (0, 0))


def qn(tag: str) -> str:
    """Turn a prefixed tag like ``w:p`` into Clark notation."""
    prefix, _, local = tag.partition(":")
    return f"{{{NAMESPACE_PREFIXES[prefix]}}}{local}"


def sub(parent: ET.Element, tag: str, **attrs: str) -> ET.Element:
    """Append a child element; attribute keys use ``prefix_local`` for qualified names."""
    element = ET.SubElement(parent, qn(tag))
    for key, value in attrs.items():
        if "_" in key:
            prefix, local = key.split("_", 1)
            element.set(qn(f"{prefix}:{local}"), value)
        else:
            element.set(key, value)
    return element


def build_drawing(image: Image, drawing_id: int) -> ET.Element:
    """
    Build a ``w:drawing`` element for an image.

    Args:
        image: Image with size, relationship id and position
        drawing_id: Document unique drawing id

    Returns:
        Drawing element holding a ``wp:inline`` or ``wp:anchor``
    """
    drawing = ET.Element(qn("w:drawing"))
    if image.position.is_floating:
        drawing.append(build_anchor(image, drawing_id))
    else:
        drawing.append(build_inline(image, drawing_id))
    return drawing


def build_inline(image: Image, drawing_id: int) -> ET.Element:
    inline = ET.Element(qn("wp:inline"), distT="0", distB="0", distL="0", distR="0")
    _add_extent_and_props(inline, image, drawing_id)
    inline.append(build_graphic(image))
    return inline


def build_anchor(image: Image, drawing_id: int) -> ET.Element:
    """Build a ``wp:anchor`` with its children in schema order."""
    position = image.position
    distance = str(ANCHOR_DISTANCE)
    anchor = ET.Element(
        qn("wp:anchor"),
        distT=distance,
        distB=distance,
        distL=distance,
        distR=distance,
        simplePos="0",
        relativeHeight=str(position.z_order),
        behindDoc="1" if position.behind_text else "0",
        locked="0",
        layoutInCell="1",
        allowOverlap="1",
    )
    sub(anchor, "wp:simplePos", x="0", y="0")

    margin_aligns = (HorizontalAlign.INSIDE, HorizontalAlign.OUTSIDE)
    position_h = sub(anchor, "wp:positionH", relativeFrom="margin" if position.h_align in margin_aligns else "column")
    if position.h_align is not None and position.offset_x == 0:
        sub(position_h, "wp:align").text = position.h_align.value
    else:
        sub(position_h, "wp:posOffset").text = str(position.offset_x)

    margin_aligns_v = (VerticalAlign.INSIDE, VerticalAlign.OUTSIDE)
    position_v = sub(anchor, "wp:positionV", relativeFrom="margin" if position.v_align in margin_aligns_v else "paragraph")
    if position.v_align is not None and position.offset_y == 0:
        sub(position_v, "wp:align").text = position.v_align.value
    else:
        sub(position_v, "wp:posOffset").text = str(position.offset_y)

    _add_extent_and_props(anchor, image, drawing_id, wrap=position.wrap_text)
    anchor.append(build_graphic(image))
    return anchor


def _add_extent_and_props(container: ET.Element, image: Image, drawing_id: int, wrap: TextWrapType = None) -> None:
    sub(container, "wp:extent", cx=str(image.size.width_emu), cy=str(image.size.height_emu))
    sub(container, "wp:effectExtent", l="0", t="0", r="0", b="0")
    if wrap is not None:
        _add_wrap(container, wrap)
    sub(container, "wp:docPr", id=str(drawing_id), name=f"Picture {image.id}", descr=image.description)


def _add_wrap(container: ET.Element, wrap: TextWrapType) -> None:
    if wrap == TextWrapType.SQUARE:
        sub(container, "wp:wrapSquare", wrapText="bothSides")
    elif wrap in (TextWrapType.TIGHT, TextWrapType.THROUGH):
        tag = "wp:wrapTight" if wrap == TextWrapType.TIGHT else "wp:wrapThrough"
        element = sub(container, tag, wrapText="bothSides")
        polygon = sub(element, "wp:wrapPolygon", edited="0")
        start, *rest = WRAP_POLYGON
        sub(polygon, "wp:start", x=str(start[0]), y=str(start[1]))
        for x, y in rest:
            sub(polygon, "wp:lineTo", x=str(x), y=str(y))
    elif wrap == TextWrapType.TOP_BOTTOM:
        sub(container, "wp:wrapTopAndBottom")
    else:
        sub(container, "wp:wrapNone")


def build_graphic(image: Image) -> ET.Element:
    """Build the ``a:graphic`` picture payload referencing the image relationship."""
    graphic = ET.Element(qn("a:graphic"))
    graphic_data = sub(graphic, "a:graphicData", uri=PICTURE_URI)
    pic = sub(graphic_data, "pic:pic")

    nv_pic_pr = sub(pic, "pic:nvPicPr")
    sub(nv_pic_pr, "pic:cNvPr", id="0", name=image.name, descr=image.description)
    c_nv_pic_pr = sub(nv_pic_pr, "pic:cNvPicPr")
    sub(c_nv_pic_pr, "a:picLocks", noChangeAspect="1")

    blip_fill = sub(pic, "pic:blipFill")
    sub(blip_fill, "a:blip", r_embed=image.relationship_id)
    stretch = sub(blip_fill, "a:stretch")
    sub(stretch, "a:fillRect")

    sp_pr = sub(pic, "pic:spPr")
    xfrm = sub(sp_pr, "a:xfrm")
    sub(xfrm, "a:off", x="0", y="0")
    sub(xfrm, "a:ext", cx=str(image.size.width_emu), cy=str(image.size.height_emu))
    geometry = sub(sp_pr, "a:prstGeom", prst="rect")
    sub(geometry, "a:avLst")
    return graphic
