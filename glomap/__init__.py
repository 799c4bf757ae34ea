"""Global structure-from-motion building blocks: scene types, geometry and processors."""

__version__ = "0.1.0"