"""native-shadcn — React Native component registry and installer.

Fetches self-contained component sources from a remote registry, resolves
their registry and package dependencies, and writes them into a project.
"""

__version__ = "0.3.0"
