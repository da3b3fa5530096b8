"""
sitecarbon package
==================

Offline analytics engine for a dataset of website carbon-footprint metrics.

- The CLI entry point is in `sitecarbon/cli.py`.
- The dashboard controller (current filters, radar selection, map settings) is in `sitecarbon/engine.py`.
- Dataset loading is in `sitecarbon/loader.py`.
"""

__version__ = '0.1.0'
