"""Command-line bridging through the Meson relayer."""

from importlib import metadata


def __getattr__(name: str) -> str:
    """Expose the package version via ``meson_bridge.__version__``."""
    if name == "__version__":
        try:
            return metadata.version("meson-bridge")
        except metadata.PackageNotFoundError:
            return "0.0.0"
    raise AttributeError(name)


__all__ = ["__version__"]
