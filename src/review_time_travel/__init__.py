"""
Review Time Travel

Step backward and forward through the commit history of a local working copy
while checking whether pull request review comments still point at the code
they originally annotated.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("review-time-travel")
except PackageNotFoundError:
    __version__ = "0.1.0"

# Public API exports
__all__ = [
    "__version__",
]
