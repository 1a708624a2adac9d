"""Tag-triggered release pipeline: build, package, publish, bump formula."""

__version__ = "0.1.0"
