"""
GemWatch - Terminal-first tender listing scraper for the GeM bid portal.

A CLI tool that pages through the public bid listing, normalizes each
card into a tender record, stores the run as JSON and filters stored
tenders by keyword rules for CSV export.
"""

__version__ = "0.1.0"
__app_name__ = "gemwatch"
