"""
Batch Image Optimizer - convert, resize and compress every image in a folder tree.
"""

__version__ = "1.0.0"
