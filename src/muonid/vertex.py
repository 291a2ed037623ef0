"""Primary-vertex selection for one event."""

from __future__ import annotations

from typing import Sequence

from .errors import MissingVertexError
from .models import Vertex


def select_primary_vertex(vertices: Sequence[Vertex]) -> Vertex:
    """Return the reference vertex of an event: the first one in the collection."""
    if not vertices:
        raise MissingVertexError("At least one reconstructed vertex is required.")
    return vertices[0]
