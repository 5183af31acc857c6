"""Building blocks for direct sparse visual odometry: images, image I/O, interpolation, pixel selection, projection and k-d tree search."""

__version__ = "0.1.0"