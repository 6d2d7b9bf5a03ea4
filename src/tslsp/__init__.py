"""tslsp – incremental tree-sitter syntax diagnostics for TypeScript."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # running from a source checkout
    __version__ = '0.0.0.dev0'
