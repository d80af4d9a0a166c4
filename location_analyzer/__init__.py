"""
Repository Location Analyzer.

Resolves hosted git repository locations into canonical catalog
entities by parsing the location, selecting provider credentials and
querying the provider's API for repository metadata.
"""

__version__ = "1.0.0"
__author__ = "Location Analyzer"
