"""Build orchestration module.

This module handles:
- Running CMake configure/build/workflow presets
- Package metadata queries and directory scans
- Static/dynamic link decisions and Cargo directive emission
- Runtime dependency staging and binding generation
- Run manifests
"""

from nativedeps.builds.directives import DirectiveEmitter
from nativedeps.builds.layout import InstallLayout

__all__ = ["DirectiveEmitter", "InstallLayout"]

# Access submodules via nativedeps.builds.service, nativedeps.builds.probe, etc.
