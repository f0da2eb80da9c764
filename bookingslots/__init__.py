"""
bookingslots - Generate bookable start times from availability windows.
"""

__version__ = "0.1.0"
