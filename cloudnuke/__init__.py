"""Find and delete stale AWS resources, one module per kind of resource."""

__version__ = "0.1.0"