"""Visualization layers.

- styles: per-geom default styling and its merge with user overrides
- layers: Altair layers for mean +/- confidence interval summaries
- export: saving charts to .html/.json/.png/.svg

Charts are saved to disk so they work in headless CI/CD environments.
"""
