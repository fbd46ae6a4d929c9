"""Debug draw sinks: receivers for ``(point_a, point_b, color)`` lines.

The debug line emitter only produces line primitives. Anything with a
``draw_line`` method can consume them: the ``LineRecorder`` here keeps them
in memory for tests and for the matplotlib viewer in
``src.lensing.preview.display``.

Example:
    >>> from src.lensing.preview.sinks import LineRecorder
    >>> recorder = LineRecorder()
    >>> recorder.draw_line((0, 0, 0), (1, 0, 0), (1.0, 1.0, 1.0))
    >>> len(recorder)
    1
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import numpy.typing as npt

from src.lensing.core.ray import as_vector


class DebugLineSink(Protocol):
    """Anything that can draw a colored line segment."""

    def draw_line(
        self,
        point_a: Sequence[float],
        point_b: Sequence[float],
        color: Sequence[float],
    ) -> None: ...


@dataclass(frozen=True)
class LineSegment:
    """One recorded line.

    Attributes:
        start: First endpoint, shape (3,).
        end: Second endpoint, shape (3,).
        color: Line color (R, G, B).
    """

    start: npt.NDArray[np.float64]
    end: npt.NDArray[np.float64]
    color: tuple[float, float, float]


class LineRecorder:
    """Sink that stores every drawn line in order."""

    def __init__(self) -> None:
        self.segments: list[LineSegment] = []

    def draw_line(
        self,
        point_a: Sequence[float],
        point_b: Sequence[float],
        color: Sequence[float],
    ) -> None:
        r, g, b = (float(c) for c in color)
        self.segments.append(LineSegment(as_vector(point_a), as_vector(point_b), (r, g, b)))

    def clear(self) -> None:
        self.segments.clear()

    def segments_with_color(self, color: Sequence[float]) -> list[LineSegment]:
        """Recorded segments whose color matches ``color``."""
        target = tuple(float(c) for c in color)
        return [s for s in self.segments if np.allclose(s.color, target)]

    def __iter__(self) -> Iterator[LineSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)
