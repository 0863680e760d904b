"""
Regional Factions
Regional power balancing and turn simulation for tabletop campaigns.
"""

__version__ = "1.0.0"
