"""Personal project and task tracker with derived project status and progress."""

__version__ = "1.0.0"
