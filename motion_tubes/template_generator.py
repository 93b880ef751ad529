"""Motion tube templates built from sampled unicycle motion primitives."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Sequence

Point = tuple[float, float]

_STRAIGHT_EPS = 1e-3


@dataclass(frozen=True)
class LidarMetadata:
    """Geometry of a planar laser scan."""

    angle_min: float
    angle_max: float
    angle_increment: float
    range_min: float
    range_max: float


@dataclass
class Template:
    """A motion tube: its boundaries, sampled points and matching scan indices."""

    left_bdry: list[Point] = field(default_factory=list)
    right_bdry: list[Point] = field(default_factory=list)
    top_bdry: list[Point] = field(default_factory=list)
    all_pts: list[Point] = field(default_factory=list)
    inds: list[int] = field(default_factory=list)
    horizon: float = 0.0
    input: Point = (0.0, 0.0)


def _div(numerator: float, denominator: float) -> float:
    """Divide, yielding an infinity (or NaN) instead of raising on zero."""
    if denominator == 0:
        return math.nan if numerator == 0 else math.copysign(math.inf, numerator)
    return numerator / denominator


def _accumulate(start: float, stop: float, step: float) -> Iterator[float]:
    """Yield start, start + step, ... while below stop, summing the step."""
    value = start
    while value < stop:
        yield value
        value += step


class TemplateGenerator:
    """Builds motion tube templates for a robot footprint and a lidar."""

    def __init__(
        self,
        footprint: Sequence[Sequence[float]],
        meta_data: LidarMetadata,
        d_aug: float,
        d_sample: float,
    ) -> None:
        if d_sample <= 0:
            raise ValueError("d_sample must be positive")
        self.footprint: list[Point] = [(float(x), float(y)) for x, y in footprint]
        self.lidar_metadata = meta_data
        self.d_aug = d_aug
        self.d_sample = d_sample
        self.templates: list[Template] = []

    def generate_template(self, input: Sequence[float], horizon: float) -> Template:
        """Build the tube for a (v, w) input over a horizon and store it."""
        v, w = float(input[0]), float(input[1])
        fp = self.footprint
        aug = self.d_aug
        command = (v, w)

        if abs(w) < _STRAIGHT_EPS:
            left_pt = (fp[0][0], fp[0][1] + aug)
            right_pt = (fp[1][0], fp[1][1] - aug)
            left = self.project_point(left_pt, command, horizon)
            right = self.project_point(right_pt, command, horizon)
        elif w > 0:
            left_pt = (fp[3][0], fp[3][1] + aug)
            right_pt = (fp[1][0], fp[1][1] - aug)
            left = self.project_point(left_pt, command, horizon)
            front_left = self.project_point(fp[0], command, horizon)[-1]
            left.extend(self.interpolate([left[-1], front_left]))
            right = self.project_point(right_pt, command, horizon)
        else:
            left_pt = (fp[0][0], fp[0][1] + aug)
            right_pt = (fp[2][0], fp[2][1] - aug)
            left = self.project_point(left_pt, command, horizon)
            right = self.project_point(right_pt, command, horizon)
            front_right = self.project_point(fp[1], command, horizon)[-1]
            right.extend(self.interpolate([right[-1], front_right]))

        top = self.interpolate([left[-1], right[-1]])
        all_pts = [*left, *top, *reversed(right)]

        template = Template(
            left_bdry=left,
            right_bdry=right,
            top_bdry=top,
            all_pts=all_pts,
            inds=self.template_to_indices(all_pts),
            horizon=horizon,
            input=command,
        )
        self.templates.append(template)
        return template

    def project_point(
        self, pt: Sequence[float], input: Sequence[float], horizon: float
    ) -> list[Point]:
        """Trace a body-frame point along the (v, w) motion, spaced about d_sample."""
        x, y = float(pt[0]), float(pt[1])
        v, w = float(input[0]), float(input[1])
        straight = abs(w) < _STRAIGHT_EPS

        if straight:
            dt = _div(self.d_sample, v)
        else:
            yterm = v / abs(w) - y
            radius = math.hypot(x, yterm)
            dt = _div(self.d_sample, abs(w) * radius)

        n = int(horizon / dt) + 1
        dt = _div(horizon, n - 1)

        points: list[Point] = []
        for t in _accumulate(0.0, horizon, dt):
            if straight:
                points.append((x + v * t, y))
            else:
                c, s = math.cos(w * t), math.sin(w * t)
                points.append(
                    (
                        x * c - y * s + v / w * s,
                        x * s + y * c + v / w * (1 - c),
                    )
                )
        return points

    def interpolate(self, pts: Sequence[Sequence[float]]) -> list[Point]:
        """Interior points of a segment, d_sample apart, excluding both ends."""
        if len(pts) != 2:
            raise ValueError(f"expected exactly 2 input points, got {len(pts)}")
        (x0, y0), (x1, y1) = pts
        dx, dy = x1 - x0, y1 - y0
        length = math.hypot(dx, dy)
        if length > 0:
            dx, dy = dx / length, dy / length
        else:
            dx, dy = 0.0, 0.0
        return [
            (x0 + dx * d, y0 + dy * d)
            for d in _accumulate(self.d_sample, length, self.d_sample)
        ]

    def template_to_indices(self, template_pts: Sequence[Sequence[float]]) -> list[int]:
        """Scan indices of the points; empty if any point lies outside the scan."""
        meta = self.lidar_metadata
        indices: list[int] = []
        for x, y in template_pts:
            theta = math.atan2(y, x)
            if theta < meta.angle_min or theta > meta.angle_max:
                return []
            indices.append(int((theta - meta.angle_min) / meta.angle_increment))
        return indices