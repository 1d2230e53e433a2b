"""
svgdom Transform Pipeline

Applies a base matrix to a sequence of elements. Every element runs its
own chain (bounding box -> element matrix -> apply) as a separate task on
the event loop. Results come back in input order, and the first failure
cancels the remaining tasks.
"""

import asyncio
import logging
from typing import List, Sequence, Union, TYPE_CHECKING

from .errors import GeometryError, SvgError
from .matrix import Matrix

if TYPE_CHECKING:
    from .shapes import SvgElement

logger = logging.getLogger(__name__)

MatrixInput = Union[None, Matrix, Sequence[Matrix]]


def resolve_base_matrix(matrix: MatrixInput) -> Matrix:
    """
    Turn the caller's matrix argument into a single base matrix.

    None means identity; a sequence is composed left to right.
    """
    if matrix is None:
        return Matrix.identity()
    if isinstance(matrix, Matrix):
        return matrix
    if isinstance(matrix, (list, tuple)):
        for item in matrix:
            if not isinstance(item, Matrix):
                raise TypeError(f"Expected Matrix instances, got {type(item).__name__}")
        return Matrix.compose(matrix)
    raise TypeError(f"Expected a Matrix or a list of matrices, got {type(matrix).__name__}")


async def transform_element(element: 'SvgElement', base: Matrix) -> 'SvgElement':
    """Run the bbox -> compose -> apply chain for one element."""
    bbox = await element.get_bbox()
    # Each branch composes onto its own copy of the base matrix
    matrix = base.clone().add(Matrix.from_element(bbox, element))
    logger.debug(f"Applying {matrix} to <{element.type}> id={element.id!r}")
    return await element.apply_matrix(matrix)


async def apply_matrix_to_elements(elements: Sequence['SvgElement'],
                                   matrix: MatrixInput = None) -> List['SvgElement']:
    """
    Apply `matrix` (plus each element's own transform) to every element.

    Returns:
        New elements, in the same order as `elements`

    Raises:
        GeometryError: if any element fails; no partial result is returned
    """
    base = resolve_base_matrix(matrix)
    if not elements:
        return []

    tasks = [asyncio.ensure_future(transform_element(element, base))
             for element in elements]
    try:
        results = await asyncio.gather(*tasks)
    except SvgError:
        _cancel_pending(tasks)
        raise
    except asyncio.CancelledError:
        _cancel_pending(tasks)
        raise
    except Exception as e:
        _cancel_pending(tasks)
        raise GeometryError("Failed to apply matrix", e) from e

    return list(results)


def _cancel_pending(tasks: List['asyncio.Future']) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
