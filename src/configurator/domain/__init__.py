"""Domain layer: kinds, handles, conversion, comparison and constraints.

This layer depends only on stdlib and pydantic.
It must never import from services, config, plugins, commands, or output.
"""
