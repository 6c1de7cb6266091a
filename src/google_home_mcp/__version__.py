"""Version of the google-home-mcp distribution, read from installed metadata."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "google-home-mcp"

try:
    __version__ = version(DISTRIBUTION)
except PackageNotFoundError:
    # Running from a source tree that was never installed
    __version__ = "0.0.0"
