"""nativedeps - native-dependency build orchestrator.

This package drives CMake to configure, build and install a C/C++ library,
discovers the installed artifacts and emits the link directives a Cargo
build script needs to consume them.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
