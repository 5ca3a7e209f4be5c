"""Version resolution for package metadata."""

try:
    from importlib.metadata import PackageNotFoundError as _PackageNotFoundError
    from importlib.metadata import version as _package_version
except ImportError:  # pragma: no cover
    _PackageNotFoundError = Exception
    _package_version = None


ENGINE_VERSION = "1.2.0"

if _package_version is not None:
    try:
        __version__ = _package_version("cipherfwx")
    except _PackageNotFoundError:
        __version__ = ENGINE_VERSION
else:
    __version__ = ENGINE_VERSION


__all__ = ["ENGINE_VERSION", "__version__"]
