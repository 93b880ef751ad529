# motion_tubes

Precomputed "motion tubes" for a differential-drive (unicycle) robot, and a
controller that uses a 2D laser scan to pick a collision-free tube.

A motion tube is the area that the robot's rectangular footprint sweeps when it
holds a constant linear and angular velocity `(v, w)` for a fixed horizon.
The boundary of each tube is sampled at a fixed spacing, and each sample is
mapped to the index of the laser beam that points at it. Checking whether a
tube is free then takes only a comparison of a few scan ranges.

The package uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Generating templates

```python
from motion_tubes.template_generator import LidarMetadata, TemplateGenerator

footprint = [(0.5, 0.3), (0.5, -0.3), (-0.5, -0.3), (-0.5, 0.3)]
meta = LidarMetadata(
    angle_min=-2.35, angle_max=2.35, angle_increment=0.00654,
    range_min=0.1, range_max=30.0,
)
generator = TemplateGenerator(footprint, meta, d_aug=0.1, d_sample=0.2)

tube = generator.generate_template((0.5, 0.3), horizon=1.0)
print(tube.input, len(tube.all_pts), tube.inds[:5])
```

Give the footprint as four corners in this order: front-left, front-right,
back-right, back-left. `d_aug` widens the tube sideways. `d_sample` sets the
spacing between boundary samples and must be positive, or the constructor
raises `ValueError`.

`generate_template` returns the new `Template` and also appends it to
`generator.templates`. A `Template` holds these members:

- `left_bdry`, `right_bdry` and `top_bdry`: the boundary samples.
- `all_pts`: the samples in order left, top, then right reversed.
- `inds`: the scan index of each sample.
- `horizon` and `input`.

If any sample of a template falls outside the scanner's angular range, the
template gets an empty `inds` list.

The generator also offers the lower-level helpers that these steps use:

- `project_point(pt, input, horizon)` traces a body-frame point along the motion.
- `interpolate([p0, p1])` returns the interior points of a segment, spaced
  `d_sample` apart. It raises `ValueError` unless it is given exactly two points.
- `template_to_indices(points)` maps points to scan indices.

## Selecting a tube

`motion_tubes.controller.Controller` puts the pieces together:

```python
from motion_tubes.controller import Controller, LaserScan, Odometry, Transform

controller = Controller(
    [[0.5, 0.3], [0.5, -0.3], [-0.5, -0.3], [-0.5, 0.3]],
    d_aug=0.1, d_sample=0.2, frame_id="map",
)
controller.set_sensor_to_base(Transform())   # laser frame -> base frame

scan = LaserScan(
    angle_min=-2.35, angle_max=2.35, angle_increment=0.00654,
    range_min=0.1, range_max=30.0, ranges=[30.0] * 720,
)
controller.on_laser_scan(scan)       # the first scan sets up the generator
controller.generate_templates()      # the full (v, w) grid; returns the count

controller.on_odometry(Odometry(position=(0.0, 0.0, 0.0),
                                orientation=(0.0, 0.0, 0.0, 1.0)))
marker = controller.control_step()
print(marker.id, len(marker.points))
```

The controller accepts its footprint in the same form as `parse_footprint`.
`parse_footprint` raises `ConfigError`, which is a `ValueError`, unless it gets
exactly four `[x, y]` pairs.

`generate_templates` builds these tubes:

- `v` runs from 0.1 to 1.5 in steps of 0.1.
- `w` runs from -1.5 to 1.5 in steps of 0.1.
- The horizon grows by 0.1 s with each `v` step, starting at 0.5 s.

`generate_templates` raises `RuntimeError` if no scan has arrived yet.

`control_step` returns `None` while odometry, a scan or the templates are still
missing. Otherwise it does the following:

1. It treats a tube as free when every checked scan range reaches at least as
   far as the matching sample.
2. Among the free tubes, it scores each by the distance between the middle of
   its front edge, taken in the odometry frame, and the goal `GOAL` (-2.25, 10.0).
3. It returns a `Marker` for the best tube.

`visualize_template(index)` builds the same kind of marker for any template. It
also keeps the marker in `controller.last_marker`.

A `Marker` is a sphere list with these members:

- `frame_id` and `id`, the template index.
- `points`: the tube's samples in world coordinates.
- `ns`, `scale`, `color` and `stamp`.

`Transform(rotation, translation)` is a rigid 3D transform. It provides
`apply(point)`, and `compose(other)`, which applies `other` first.

## What this package does not do

The controller is a plain object that you drive yourself. It does not
subscribe to sensor topics, look up frame transforms, run a timer loop, or
publish markers. Your code feeds it `LaserScan`, `Odometry` and `Transform`
values, calls `control_step` as often as it needs, and decides what to do with
the `Marker` that comes back. The package also sends no velocity commands to
a robot.