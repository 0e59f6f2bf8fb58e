"""Triangulation of planar polygons by ear clipping."""

from __future__ import annotations

import math
from collections.abc import Sequence

# Single-precision pi, the bound used when rejecting reflex corners.
_PI = 3.1415927410125732
_REFLEX_ANGLE = 10000.0

Vec = tuple[float, ...]


def _sub(lhs: Vec, rhs: Vec) -> Vec:
    return tuple(a - b for a, b in zip(lhs, rhs))


def _dot(lhs: Vec, rhs: Vec) -> float:
    return sum(a * b for a, b in zip(lhs, rhs))


def _normalize(v: Vec) -> Vec:
    length = math.sqrt(_dot(v, v))
    if length == 0.0:
        return tuple(math.nan for _ in v)
    return tuple(a / length for a in v)


def _cross(lhs: Vec, rhs: Vec) -> Vec:
    return (
        lhs[1] * rhs[2] - lhs[2] * rhs[1],
        lhs[2] * rhs[0] - lhs[0] * rhs[2],
        lhs[0] * rhs[1] - lhs[1] * rhs[0],
    )


def _angle_at(idx: int, points: list[Vec], prev: list[int], nxt: list[int]) -> float:
    xaxis = _normalize(_sub(points[nxt[idx]], points[idx]))
    yaxis = (-xaxis[1], xaxis[0])
    to_prev = _sub(points[prev[idx]], points[idx])
    angle = math.atan2(_dot(to_prev, yaxis), _dot(to_prev, xaxis))
    if angle <= 0.0 or angle >= _PI:
        angle = _REFLEX_ANGLE
    return angle


def triangulate_polygon(
    indices: Sequence[int], positions: Sequence[Sequence[float]]
) -> list[tuple[int, int, int]]:
    """Split a polygon into triangles.

    ``indices`` are the polygon's vertex indices in order and ``positions``
    the ``(x, y, z)`` coordinates they refer to. Polygons with fewer than
    three corners give no triangles; triangles and quads are split without
    looking at positions. Larger polygons whose indices fall outside
    ``positions`` give no triangles.
    """
    indices = [int(i) for i in indices]
    n = len(indices)
    if n < 3:
        return []
    if n == 3:
        return [(indices[0], indices[1], indices[2])]
    if n == 4:
        return [
            (indices[0], indices[1], indices[3]),
            (indices[2], indices[3], indices[1]),
        ]

    num_verts = len(positions)
    if any(i < 0 or i >= num_verts for i in indices):
        return []

    corners = [tuple(float(c) for c in positions[i][:3]) for i in indices]
    origin = corners[0]
    face_u = _normalize(_sub(corners[1], origin))
    face_normal = _normalize(_cross(face_u, _normalize(_sub(corners[-1], origin))))
    face_v = _normalize(_cross(face_normal, face_u))

    points2d: list[Vec] = [(0.0, 0.0)]
    for corner in corners[1:]:
        rel = _sub(corner, origin)
        points2d.append((_dot(rel, face_u), _dot(rel, face_v)))

    nxt = [(i + 1) % n for i in range(n)]
    prev = [(i - 1) % n for i in range(n)]
    first = 0
    remaining = n
    triangles: list[tuple[int, int, int]] = []

    while remaining > 3:
        best = first
        best_angle = _angle_at(first, points2d, prev, nxt)
        i = nxt[first]
        while i != first:
            angle = _angle_at(i, points2d, prev, nxt)
            if angle < best_angle:
                best = i
                best_angle = angle
            i = nxt[i]

        next_i = nxt[best]
        prev_i = prev[best]
        triangles.append((indices[best], indices[next_i], indices[prev_i]))

        if best == first:
            first = next_i
        nxt[prev_i] = next_i
        prev[next_i] = prev_i
        remaining -= 1

    triangles.append((indices[first], indices[nxt[first]], indices[prev[first]]))
    return triangles