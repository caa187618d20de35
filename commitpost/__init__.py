"""Post release-worthy git commits to Bluesky or Twitter/X."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("commitpost")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
