import math

import pytest

from motion_tubes.controller import (
    ConfigError,
    Controller,
    LaserScan,
    Marker,
    Odometry,
    Transform,
    parse_footprint,
)

FOOTPRINT = [[0.5, 0.3], [0.5, -0.3], [-0.5, -0.3], [-0.5, 0.3]]


def _scan(ranges):
    return LaserScan(
        angle_min=-math.pi,
        angle_max=math.pi,
        angle_increment=0.01,
        range_min=0.1,
        range_max=30.0,
        ranges=ranges,
    )


@pytest.fixture
def controller():
    ctrl = Controller(FOOTPRINT, 0.1, 0.2, "map")
    ctrl.on_laser_scan(_scan([math.inf] * 700))
    ctrl.on_odometry(Odometry())
    return ctrl


def test_parse_footprint_valid():
    assert parse_footprint(FOOTPRINT) == [tuple(p) for p in FOOTPRINT]


@pytest.mark.parametrize(
    "param",
    [
        None,
        "footprint",
        FOOTPRINT[:3],
        FOOTPRINT + [[0.0, 0.0]],
        [[0.5, 0.3], [0.5], [-0.5, -0.3], [-0.5, 0.3]],
        [[0.5, 0.3], [0.5, "x"], [-0.5, -0.3], [-0.5, 0.3]],
        [[0.5, 0.3], 7, [-0.5, -0.3], [-0.5, 0.3]],
    ],
)
def test_parse_footprint_rejects_bad_input(param):
    with pytest.raises(ConfigError):
        parse_footprint(param)


def test_controller_rejects_bad_footprint():
    with pytest.raises(ConfigError):
        Controller([[0.0, 0.0]], 0.1, 0.2, "map")


def test_identity_transform_leaves_points():
    assert Transform().apply((1.5, -2.0, 0.25)) == pytest.approx((1.5, -2.0, 0.25))


def test_compose_matches_sequential_application():
    c, s = math.cos(0.7), math.sin(0.7)
    rot = Transform(((c, -s, 0.0), (s, c, 0.0), (0.0, 0.0, 1.0)), (1.0, 2.0, 0.0))
    shift = Transform(translation=(0.3, -0.4, 0.5))
    point = (2.0, -1.0, 0.5)
    assert rot.compose(shift).apply(point) == pytest.approx(rot.apply(shift.apply(point)))
    assert shift.compose(rot).apply(point) == pytest.approx(shift.apply(rot.apply(point)))


def test_odometry_sets_pose_and_transform():
    ctrl = Controller(FOOTPRINT, 0.1, 0.2, "map")
    half = math.pi / 4
    ctrl.on_odometry(Odometry((2.0, 3.0, 0.7), (0.0, 0.0, math.sin(half), math.cos(half))))
    assert ctrl.is_odom_set
    assert ctrl.pose == pytest.approx((2.0, 3.0, math.pi / 2))
    assert ctrl.base_to_odom.apply((1.0, 0.0, 0.0)) == pytest.approx((2.0, 4.0, 0.0))


def test_control_step_before_initialisation_returns_none():
    ctrl = Controller(FOOTPRINT, 0.1, 0.2, "map")
    assert ctrl.control_step() is None
    ctrl.on_laser_scan(_scan([math.inf] * 700))
    assert ctrl.control_step() is None


def test_generate_templates_requires_scan():
    ctrl = Controller(FOOTPRINT, 0.1, 0.2, "map")
    with pytest.raises(RuntimeError):
        ctrl.generate_templates()


def test_first_scan_initialises_generator_once():
    ctrl = Controller(FOOTPRINT, 0.1, 0.2, "map")
    ctrl.on_laser_scan(_scan([1.0] * 700))
    generator = ctrl.generator
    ctrl.on_laser_scan(_scan([2.0] * 700))
    assert ctrl.generator is generator
    assert ctrl.laser_scan.ranges[0] == 2.0
    assert generator.lidar_metadata.angle_increment == 0.01


def test_generate_templates_covers_grid(controller):
    count = controller.generate_templates()
    templates = controller.generator.templates
    assert count == len(templates)
    velocities = sorted({round(t.input[0], 6) for t in templates})
    assert velocities[0] == pytest.approx(0.1)
    assert velocities[-1] == pytest.approx(1.5)
    horizons = [t.horizon for t in templates]
    assert horizons == sorted(horizons)
    assert min(horizons) == pytest.approx(0.5)


def test_control_step_prefers_template_towards_goal(controller):
    controller.generator.generate_template((1.0, 0.0), 1.0)
    controller.generator.generate_template((1.0, 1.0), 1.0)
    marker = controller.control_step()
    assert isinstance(marker, Marker)
    assert marker.id == 1
    assert marker.frame_id == "map"
    assert marker.ns == "template_viz"
    assert len(marker.points) == len(controller.generator.templates[1].all_pts)
    assert controller.last_marker is marker


def test_control_step_blocked_falls_back_to_first(controller):
    controller.on_laser_scan(_scan([0.05] * 700))
    controller.generator.generate_template((1.0, 0.0), 1.0)
    controller.generator.generate_template((1.0, 1.0), 1.0)
    marker = controller.control_step()
    assert marker.id == 0


def test_out_of_range_indices_are_skipped(controller):
    controller.on_laser_scan(_scan([]))
    controller.generator.generate_template((1.0, 0.0), 1.0)
    controller.generator.generate_template((1.0, 1.0), 1.0)
    assert controller.control_step().id == 1


def test_visualize_template_uses_world_frame(controller):
    controller.generator.generate_template((1.0, 0.0), 1.0)
    controller.on_odometry(Odometry((5.0, -1.0, 0.0)))
    marker = controller.visualize_template(0)
    template = controller.generator.templates[0]
    assert len(marker.points) == len(template.all_pts)
    for (x, y), (wx, wy, wz) in zip(template.all_pts, marker.points):
        assert (wx, wy, wz) == pytest.approx((x + 5.0, y - 1.0, 0.0))


def test_visualize_template_applies_sensor_offset(controller):
    controller.generator.generate_template((1.0, 0.0), 1.0)
    controller.set_sensor_to_base(Transform(translation=(0.2, 0.0, 0.3)))
    marker = controller.visualize_template(0)
    template = controller.generator.templates[0]
    first = template.all_pts[0]
    assert marker.points[0] == pytest.approx((first[0] + 0.2, first[1], 0.0))


def test_visualize_template_bad_index(controller):
    with pytest.raises(IndexError):
        controller.visualize_template(3)