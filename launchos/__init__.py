"""LaunchOS: launch plan generation, integrity and execution tracking."""

__version__ = "0.1.0"
