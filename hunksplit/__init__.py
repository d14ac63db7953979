"""Split uncommitted git changes into a stack of atomic commits."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("hunksplit")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
