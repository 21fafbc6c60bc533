"""CoLearn - AI-assisted learning platform API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("colearn")
except PackageNotFoundError:
    __version__ = "0+unknown"
