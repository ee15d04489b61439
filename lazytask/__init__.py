"""LazyTask: personal task tracker with a CLI and a terminal dashboard."""

__version__ = "0.3.0"
