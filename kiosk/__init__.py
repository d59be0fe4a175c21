"""
                Event Kiosk POS

Order entry, kitchen tracking and a live customer display for a
temporary food-vendor event, with an admin back office for the menu,
staff accounts and sales figures.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
