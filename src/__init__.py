"""launchprep: prepares and dispatches single-runnable program launches.

Kept free of third-party imports: this package's __init__ ships inside the
launcher bundle, which runs before any dependency is on sys.path.
"""

from launchprep.version import __version__

__all__ = ["__version__"]
