"""
SVG Parser for svgdom

Turns SVG markup or its JSON form into ordered lists of SvgElement
instances, materializing groups recursively.
"""

import logging
import math
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from ..core.errors import SvgParseError
from ..core.matrix import Matrix, resolve_transform_origin
from ..core.shapes import ELEMENT_TYPES, BoundingBox, Group, SvgElement
from ..core.units import parse_number

logger = logging.getLogger(__name__)

# Keys handled by the parser itself rather than by the element classes
COMMON_KEYS = ('id', 'transform', 'transform-origin')


class SVGParser:
    """Parse SVG markup and SVG JSON into element lists."""

    SVG_NS = '{http://www.w3.org/2000/svg}'

    async def convert_xml(self, source: Union[str, bytes, ET.Element]) -> List[SvgElement]:
        """
        Convert SVG markup (or an already parsed root) to elements.

        Raises:
            SvgParseError: on malformed markup or bad attribute values
        """
        root = source if isinstance(source, ET.Element) else self.parse_markup(source)
        tag = self._local_name(root.tag)

        if tag == 'svg':
            elements = self._convert_children(root)
        elif tag in ELEMENT_TYPES:
            elements = [self._convert_xml_element(root, tag)]
        else:
            raise SvgParseError(f"Root element <{tag}> is not an SVG document")

        logger.debug(f"Converted {len(elements)} top-level XML elements")
        return elements

    async def convert_json(self, data: Any) -> List[SvgElement]:
        """
        Convert the JSON form ({"elements": [...]} or a bare list) to elements.

        Raises:
            SvgParseError: on unknown element types or bad geometry
        """
        if isinstance(data, Mapping):
            if 'elements' not in data:
                raise SvgParseError("JSON document has no 'elements' list")
            items = data['elements']
        else:
            items = data

        if not isinstance(items, list):
            raise SvgParseError(f"Expected a list of elements, got {type(items).__name__}")

        elements = [self._convert_json_element(item) for item in items]
        logger.debug(f"Converted {len(elements)} top-level JSON elements")
        return elements

    # XML

    def parse_markup(self, markup: Union[str, bytes]) -> ET.Element:
        """Parse markup with DTDs, entities and external references refused."""
        if isinstance(markup, str):
            markup = markup.encode('utf-8')
        try:
            return DefusedET.fromstring(
                markup,
                forbid_dtd=True,
                forbid_entities=True,
                forbid_external=True,
            )
        except (ET.ParseError, DefusedXmlException) as e:
            raise SvgParseError("Invalid XML", e) from e

    def _local_name(self, tag: str) -> str:
        return tag.split('}')[-1]

    def _convert_children(self, parent: ET.Element) -> List[SvgElement]:
        elements: List[SvgElement] = []
        for child in parent:
            if not isinstance(child.tag, str):
                continue
            tag = self._local_name(child.tag)
            if tag == 'svg':
                # Nested viewports are flattened into their parent
                elements.extend(self._convert_children(child))
            elif tag in ELEMENT_TYPES:
                elements.append(self._convert_xml_element(child, tag))
            else:
                logger.debug(f"Skipping unsupported element <{tag}>")
        return elements

    def _convert_xml_element(self, node: ET.Element, tag: str) -> SvgElement:
        cls = ELEMENT_TYPES[tag]
        element = self._build(cls, dict(node.attrib), exclude=())
        if isinstance(element, Group):
            element.childs = self._convert_children(node)
        return element

    # JSON

    def _convert_json_element(self, item: Any) -> SvgElement:
        if not isinstance(item, Mapping):
            raise SvgParseError(f"Expected an element object, got {item!r}")

        element_type = item.get('type')
        cls = ELEMENT_TYPES.get(element_type)
        if cls is None:
            raise SvgParseError(f"Unknown element type: {element_type!r}")

        element = self._build(cls, item, exclude=('type',))
        if isinstance(element, Group):
            childs = item.get('childs', item.get('elements', []))
            if not isinstance(childs, list):
                raise SvgParseError(f"Group children must be a list, got {childs!r}")
            element.childs = [self._convert_json_element(child) for child in childs]
        return element

    # Shared

    def _build(self, cls: Type[SvgElement], data: Mapping[str, Any],
               exclude: Iterable[str]) -> SvgElement:
        element = cls.from_geometry(data)

        element_id = data.get('id')
        element.id = str(element_id) if element_id is not None else None
        element.transform = self._parse_transform(data.get('transform'))
        element.transform_origin = self._parse_transform_origin(data.get('transform-origin'))

        skipped = set(cls.GEOMETRY_KEYS) | set(COMMON_KEYS) | set(exclude)
        element.attributes = {
            key: value for key, value in data.items() if key not in skipped
        }
        return element

    def _parse_transform(self, value: Any) -> Optional[Matrix]:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            if len(value) != 6:
                raise SvgParseError(f"Matrix needs 6 values, got {value!r}")
            values = [parse_number(v, 'transform') for v in value]
            if not all(math.isfinite(v) for v in values):
                raise SvgParseError(f"Non-finite matrix value in {value!r}")
            return Matrix(*values)
        if not isinstance(value, str):
            raise SvgParseError(f"Invalid transform: {value!r}")
        if not value.strip():
            return None
        return Matrix.parse(value)

    def _parse_transform_origin(self, value: Any) -> Optional[str]:
        """Check a transform-origin value; keywords and percentages resolve later."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise SvgParseError(f"Invalid transform-origin: {value!r}")
        if not value.strip():
            return None
        resolve_transform_origin(value, BoundingBox(0.0, 0.0, 0.0, 0.0))
        return value.strip()
