"""envfold: deterministic logical-environment resolution for build tooling."""

__version__ = "0.1.0"
