"""Platform profile resolution.

This module handles:
- The static preset table and its schema
- Resolving (OS, architecture, profile) triples to BuildProfile
- Loading replacement preset tables from YAML
"""

from nativedeps.profiles.resolver import BuildProfile, resolve

__all__ = ["BuildProfile", "resolve"]
