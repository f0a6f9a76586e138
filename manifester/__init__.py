"""
Odyssey manifester.

Keeps a geocoded coordinate cache in sync with the place/trip configuration
and generates the typed Manifest module used by the travel site.
"""

__version__ = "1.0.0"
