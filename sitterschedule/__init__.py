"""
sitterschedule - availability, unavailability and boarding-date management
for pet sitters.
"""

__version__ = "0.1.0"
