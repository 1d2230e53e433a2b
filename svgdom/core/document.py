"""
svgdom Document Model

The Svg class is the root container for a parsed or constructed drawing.
It owns an ordered list of top-level elements (groups nest further
elements) and provides lookup, serialization and the transform pipeline.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from .pipeline import MatrixInput, apply_matrix_to_elements
from .shapes import SvgElement, find_element_by_id, find_elements_by_type

if TYPE_CHECKING:
    from ..io.export import ExportSettings

logger = logging.getLogger(__name__)

SVG_NAMESPACE = 'http://www.w3.org/2000/svg'
SVG_VERSION = '1.1'


class Svg:
    """
    An SVG document.

    Element order is document (z-)order and is kept by every operation,
    including apply_matrix().
    """

    def __init__(self, elements: Optional[List[SvgElement]] = None):
        self.elements: List[SvgElement] = list(elements or [])

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[SvgElement]:
        return iter(self.elements)

    def set_elements(self, elements: List[SvgElement]) -> None:
        """Replace all elements. Duplicate ids are not checked."""
        self.elements = list(elements)

    def add_element(self, element: SvgElement) -> None:
        """Append an element to the document."""
        self.elements.append(element)

    # Serialization

    def to_json(self, omit_transform: bool = False) -> Dict[str, Any]:
        """
        Convert the document to its JSON form.

        Args:
            omit_transform: Leave transform attributes out

        Returns:
            {"elements": [...]} with one entry per top-level element
        """
        return {
            'elements': [element.to_json(omit_transform) for element in self.elements]
        }

    def to_xml(self, omit_transform: bool = False) -> ET.Element:
        """Build the <svg> root element with every element as a child."""
        svg = ET.Element('svg')
        svg.set('version', SVG_VERSION)
        svg.set('xmlns', SVG_NAMESPACE)

        for element in self.elements:
            svg.append(element.to_xml(omit_transform))

        return svg

    def to_string(self, wrap: bool = True, omit_transform: bool = False) -> str:
        """
        Serialize the document to markup.

        Args:
            wrap: True for a full <svg>...</svg> document, False for the
                element tags alone, concatenated in order
            omit_transform: Leave transform attributes out
        """
        if wrap:
            return ET.tostring(self.to_xml(omit_transform), encoding='unicode')
        return ''.join(element.to_string(omit_transform) for element in self.elements)

    def __str__(self) -> str:
        return self.to_string(True)

    # Lookup

    def find_by_type(self, type: str, recursive: bool = False) -> 'Svg':
        """
        Return a new document holding the elements of the given type.

        Args:
            type: Element type (rect, polygon, g, ...)
            recursive: Also search inside groups

        Returns:
            New Svg sharing the matching element instances
        """
        return Svg(find_elements_by_type(self.elements, type, recursive))

    def find_by_id(self, id: str) -> Optional[SvgElement]:
        """Return the first element with this id (depth first), or None."""
        return find_element_by_id(self.elements, id)

    # Transforms

    async def apply_matrix(self, matrix: MatrixInput = None) -> 'Svg':
        """
        Generate a new document with all transforms applied.

        Every element gets `matrix` composed with its own transform baked
        into its coordinates. Rects come out as polygons.

        Args:
            matrix: A Matrix, a list of matrices composed left to right,
                or None for identity

        Returns:
            New Svg with elements in the original order

        Raises:
            GeometryError: if any element fails
        """
        elements = await apply_matrix_to_elements(self.elements, matrix)
        logger.debug(f"Applied matrix to {len(elements)} elements")
        return Svg(elements)

    # Persistence

    async def save(self, output: Optional[str] = None,
                   settings: Optional['ExportSettings'] = None,
                   omit_transform: bool = False) -> str:
        """Write the document to an SVG file and return its path."""
        from ..io.export import save_svg
        return await save_svg(self, output, settings, omit_transform)

    async def save_png(self, output: Optional[str] = None,
                       settings: Optional['ExportSettings'] = None) -> str:
        """Render the document to a raster image and return its path."""
        from ..io.export import save_raster
        return await save_raster(self, output, settings)
