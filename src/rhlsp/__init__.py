"""rhlsp – Rhetos DSL Language Server."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version('rhlsp')
except PackageNotFoundError:
    __version__ = '0.0.0.dev0'
