"""Version information for share-keeper."""

try:
    from share_keeper._version import __version__
except ImportError:
    # Running from a source checkout without a generated version file
    __version__ = "0.0.0+unknown"
