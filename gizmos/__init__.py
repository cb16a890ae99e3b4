"""Interactive 3D rotation gizmo with ray picking, transform helpers and pyglet OpenGL wrappers."""

__version__ = "0.1.0"