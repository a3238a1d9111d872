"""Core computation: catalog, scoring, lifecycle, comparison and reporting."""
