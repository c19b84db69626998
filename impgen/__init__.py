"""
iMUSE map generator

Derives intro/loop/outro segment boundaries for X-Wing Alliance music
tracks and writes the .imp map files consumed by the VIMA compressor.
"""

__version__ = "1.0.0"
__author__ = "impgen contributors"
