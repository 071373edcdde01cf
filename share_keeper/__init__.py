"""
share-keeper - Keeps a folder of git working copies in sync
"""

from .__version__ import __version__
from .core import ShareKeeper
from .cli.main import main

__all__ = ["ShareKeeper", "main", "__version__"]
