"""
foretell: pick a card name from a locally cached list and look at it.

The card-name cache is refreshed in the background from Scryfall, one
missing set at a time, while the picker runs on whatever is on disk.
"""

__version__ = "1.0.0"
