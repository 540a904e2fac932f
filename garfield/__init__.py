"""Knowledge-graph data model, file detection, caching and graph diffs."""

__version__ = "0.2.0"

__all__ = ["cache", "detect", "diff", "graph"]