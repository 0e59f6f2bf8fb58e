"""Read PLY point clouds and polygon meshes, and write triangle meshes."""

__version__ = "0.1.0"
__all__ = ["__version__"]