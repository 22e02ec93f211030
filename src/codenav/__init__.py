"""codenav: a project-local code index and symbol cross-reference engine."""

__version__ = "0.1.0"
