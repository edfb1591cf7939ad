"""
PlopColor: dominant color and k-means++ palette extraction for dropped images.
"""

__version__ = "1.0.0"
