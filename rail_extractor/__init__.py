"""
Railway Data Extractor

Pre-computes railway line geometry and station files per country from the
Overpass API, for static hosting alongside a map client.
"""

__version__ = "1.0.0"
