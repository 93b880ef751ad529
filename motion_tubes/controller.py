"""Selects the motion tube template that best approaches a goal through free space."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Sequence

from motion_tubes.template_generator import LidarMetadata, Point, TemplateGenerator

logger = logging.getLogger(__name__)

GOAL: Point = (-2.25, 10.0)
FOOTPRINT_POINTS = 4

Vector3 = tuple[float, float, float]
Matrix3 = tuple[Vector3, Vector3, Vector3]

_IDENTITY: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


class ConfigError(ValueError):
    """Raised when controller configuration is missing or malformed."""


def parse_footprint(param: Any) -> list[Point]:
    """Validate a footprint parameter: exactly four [x, y] points."""
    if param is None:
        raise ConfigError("Failed to get 'footprint' parameter")
    if not isinstance(param, (list, tuple)):
        raise ConfigError("'footprint' parameter is not an array")
    if len(param) != FOOTPRINT_POINTS:
        raise ConfigError(
            f"currently only support 4 points for footprint, got {len(param)} points"
        )
    points: list[Point] = []
    for index, point in enumerate(param):
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            raise ConfigError(f"Invalid footprint point at index {index}")
        try:
            points.append((float(point[0]), float(point[1])))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid footprint point at index {index}") from exc
    return points


def _quaternion_to_rotation(q: Sequence[float]) -> Matrix3:
    x, y, z, w = q
    return (
        (1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)),
        (2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)),
        (2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)),
    )


def _yaw(q: Sequence[float]) -> float:
    x, y, z, w = q
    return math.atan2(2 * (x * y + w * z), w * w + x * x - y * y - z * z)


def _mat_vec(m: Matrix3, v: Sequence[float]) -> Vector3:
    return tuple(sum(a * b for a, b in zip(row, v)) for row in m)  # type: ignore[return-value]


@dataclass(frozen=True)
class Transform:
    """A rigid 3D transform: rotation matrix followed by translation."""

    rotation: Matrix3 = _IDENTITY
    translation: Vector3 = (0.0, 0.0, 0.0)

    def apply(self, point: Sequence[float]) -> Vector3:
        """Map a 3D point through the transform."""
        rotated = _mat_vec(self.rotation, point)
        return tuple(r + t for r, t in zip(rotated, self.translation))  # type: ignore[return-value]

    def compose(self, other: Transform) -> Transform:
        """The transform that applies ``other`` first, then ``self``."""
        columns = list(zip(*other.rotation))
        rotation = tuple(
            tuple(sum(a * b for a, b in zip(row, col)) for col in columns)
            for row in self.rotation
        )
        return Transform(rotation, self.apply(other.translation))  # type: ignore[arg-type]


@dataclass
class LaserScan:
    """A planar laser scan."""

    angle_min: float
    angle_max: float
    angle_increment: float
    range_min: float
    range_max: float
    ranges: Sequence[float] = field(default_factory=list)


@dataclass
class Odometry:
    """A robot pose estimate."""

    position: Vector3 = (0.0, 0.0, 0.0)
    orientation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    frame_id: str = "odom"


@dataclass
class Marker:
    """A sphere-list visualisation of a template in the world frame."""

    frame_id: str
    id: int
    points: list[Vector3] = field(default_factory=list)
    ns: str = "template_viz"
    scale: float = 0.05
    color: tuple[float, float, float, float] = (0.0, 0.0, 1.0, 1.0)
    stamp: float = field(default_factory=time.time)


class Controller:
    """Scores precomputed motion tubes against the latest scan and pose."""

    def __init__(
        self,
        footprint: Any,
        d_aug: float = 0.1,
        d_sample: float = 0.2,
        frame_id: str = "map",
    ) -> None:
        self.footprint = parse_footprint(footprint)
        self.d_aug = d_aug
        self.d_sample = d_sample
        self.frame_id = frame_id

        self.generator: TemplateGenerator | None = None
        self.laser_scan: LaserScan | None = None
        self.pose: Vector3 = (0.0, 0.0, 0.0)
        self.sensor_to_base = Transform()
        self.base_to_odom = Transform()
        self.is_odom_set = False
        self.last_marker: Marker | None = None

    def set_sensor_to_base(self, transform: Transform) -> None:
        """Set the sensor frame's pose in the robot base frame."""
        self.sensor_to_base = transform

    def on_laser_scan(self, scan: LaserScan) -> None:
        """Store a scan; the first one sets up the template generator."""
        self.laser_scan = scan
        if self.generator is None:
            meta = LidarMetadata(
                angle_min=scan.angle_min,
                angle_max=scan.angle_max,
                angle_increment=scan.angle_increment,
                range_min=scan.range_min,
                range_max=scan.range_max,
            )
            self.generator = TemplateGenerator(
                self.footprint, meta, self.d_aug, self.d_sample
            )
            logger.info("Initialized Laserscan!")

    def on_odometry(self, odom: Odometry) -> None:
        """Update the robot pose from odometry."""
        x, y, _ = odom.position
        self.pose = (x, y, _yaw(odom.orientation))
        self.base_to_odom = Transform(
            _quaternion_to_rotation(odom.orientation), (x, y, 0.0)
        )
        self.is_odom_set = True

    def generate_templates(self) -> int:
        """Fill the generator with the standard grid of inputs; return the count."""
        if self.generator is None:
            raise RuntimeError("no laser scan received; template generator not initialized")
        logger.info("Generating templates")
        ind = 0
        v = 0.1
        while v < 1.6:
            horizon = 0.5 + ind * 0.1
            w = -1.5
            while w < 1.6:
                self.generator.generate_template((v, w), horizon)
                w += 0.1
            ind += 1
            v += 0.1
        count = len(self.generator.templates)
        logger.info("Generated %d templates", count)
        return count

    def control_step(self) -> Marker | None:
        """Pick the free template nearest the goal and return its marker."""
        if not self.is_odom_set or self.generator is None or self.laser_scan is None:
            logger.warning("Odom not set or template generator not initialized yet.")
            return None
        templates = self.generator.templates
        if not templates:
            logger.warning("No templates generated yet.")
            return None

        ranges = self.laser_scan.ranges
        to_world = self.base_to_odom.compose(self.sensor_to_base)
        score = 1e6
        champion = 0
        for index, template in enumerate(templates):
            is_free = True
            sample_iter = iter(template.all_pts)
            for ind in template.inds:
                if ind >= len(ranges):
                    logger.warning(
                        "Index %d out of bounds for laser scan ranges of size %d",
                        ind,
                        len(ranges),
                    )
                    continue
                sample = next(sample_iter)
                if ranges[ind] < math.hypot(*sample):
                    logger.info(
                        "index is: %d sample is: %s and range is: %s",
                        ind,
                        sample,
                        ranges[ind],
                    )
                    is_free = False
                    break

            if not template.top_bdry:
                continue
            mx, my = template.top_bdry[len(template.top_bdry) // 2]
            wx, wy, _ = to_world.apply((mx, my, 0.0))
            dist = math.hypot(GOAL[0] - wx, GOAL[1] - wy)

            if is_free:
                logger.debug("found a free template!")
                if dist < score:
                    score = dist
                    champion = index

        return self.visualize_template(champion)

    def visualize_template(self, index: int) -> Marker:
        """Build a world-frame marker for the template at ``index``."""
        if self.generator is None:
            raise RuntimeError("template generator not initialized")
        template = self.generator.templates[index]
        logger.info("visualizing template with input %s", template.input)
        to_world = self.base_to_odom.compose(self.sensor_to_base)
        points = []
        for x, y in template.all_pts:
            wx, wy, _ = to_world.apply((x, y, 0.0))
            points.append((wx, wy, 0.0))
        marker = Marker(frame_id=self.frame_id, id=index, points=points)
        self.last_marker = marker
        return marker