"""Domain layer: rules, snapshots, matching, and the resolution fold.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
