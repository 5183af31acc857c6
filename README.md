# dsokit

Building blocks for direct sparse visual odometry, on top of NumPy and Pillow.

## Modules

- `dsokit.numtypes`: `AffLight`, the affine brightness model
  (`I_frame = exp(a) * I_global + b`). `AffLight.from_to_vec_exposure`
  returns the `(a, b)` transfer between two frames; a zero exposure on either
  side makes both count as 1. Also the constants `MAX_RES_PER_POINT`,
  `NUM_THREADS` and `CPARS`.
- `dsokit.minimal_image`: `MinimalImage`, a `w` x `h` image backed by a NumPy
  array of shape `(h, w, ...)`. It owns a zeroed float32 buffer, or wraps an
  array you pass in. It has `at` / `set_at` (coordinates truncated, bounds
  checked), `clone`, `set_black`, `set_const`, and drawing helpers
  `set_pixel1`, `set_pixel4`, `set_pixel9` and `set_pixel_circ`.
- `dsokit.frames`: `ImageAndExposure`, a float32 irradiance image with a
  timestamp and an exposure time (`copy_meta_to`, `deep_copy`). `FrameShell`
  is a dataclass for the record kept for each tracked frame. Its poses are
  4x4 matrices.
- `dsokit.image_io`: `read_image_bw_8u`, `read_image_rgb_8u`,
  `read_image_bw_16u`, `read_stream_bw_8u` (decode from bytes) and
  `write_image`. Colour images are in BGR channel order. A read that fails,
  or that finds the wrong pixel format, raises `ImageReadError`. When
  writing, float pixels are rounded and clipped to 8 bits.
- `dsokit.interpolation`: sampling of `(h, w)` or `(h, w, c)` arrays at
  `(x, y)`. It covers `bilinear`, `bilinear_channels`, `bilinear_over_and`,
  `bilinear_over_or`, `bilinear_gradient`, `cubic`, `cubic_with_derivative`,
  `bicubic` and `bicubic_gradient`. A sample that needs pixels outside the
  image raises `IndexError`. There are also the colour maps `rainbow_f3`,
  `rainbow_3b`, `jet_3b` and `red_green_3b`.
- `dsokit.pixel_selector`: `grid_max_selection` picks the pixels with the
  strongest gradients in each grid cell. `make_pixel_status` adapts the grid
  size until the count nears a desired density. Both return a `PixelStatus`
  (`map`, `num_good`, `sparsity_factor`).
- `dsokit.projection`: `Intrinsics` describes a pinhole camera. The module
  has `derive_idepth`, `project_point` (returns `(ku, kv, inside)`) and
  `project_point_full`, which returns a `Projection` record.
- `dsokit.kdresults`: `KNNResultSet` and `RadiusResultSet`.
- `dsokit.kdmetrics`: the metrics `L1Distance`, `L2Distance` and
  `L2SimpleDistance`, and the `SearchParams` search options.
- `dsokit.kdtree`: `KDTree`, with `knn_search`, `radius_search`,
  `find_neighbors`, `build_index`, `save_index` and `load_index`. A saved
  index holds no point data, so it must be loaded into a tree built over the
  same points.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
import numpy as np
from dsokit.kdtree import KDTree
from dsokit.interpolation import bilinear
from dsokit.numtypes import AffLight

points = np.random.default_rng(0).random((100, 3))
tree = KDTree(points)
neighbours = tree.knn_search(points[0], 3)   # [(index, squared distance), ...]

image = np.arange(16, dtype=np.float32).reshape(4, 4)
value = bilinear(image, 1.5, 1.5)            # 7.5

a, b = AffLight.from_to_vec_exposure(1.0, 2.0, AffLight(), AffLight())  # (2.0, 0.0)
```

## What it does not do

dsokit is a library of parts. It has no command-line program. It does not
track a camera or build a map from a sequence of images, and it has no viewer
or display. It has no thread pool for splitting work across cores; every
function runs in the calling thread.