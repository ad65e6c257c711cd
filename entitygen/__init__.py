"""
entitygen - class generation from entity schemas.

Resolves single-inheritance entity hierarchies and renders one output unit
per entity.
"""

__version__ = "0.1.0"
