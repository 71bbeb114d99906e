"""
zvpms - Zig version manager and proxy.

Installs multiple Zig toolchains side by side, tracks which one is current,
and forwards compiler invocations to the selected toolchain.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
