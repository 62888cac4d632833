"""Command line entry points for the Meraki MT to PRTG bridge."""

from importlib import import_module
from types import ModuleType

_SUBMODULES = frozenset({"provision", "render", "sensor"})


def __getattr__(name: str) -> ModuleType:
    if name in _SUBMODULES:
        return import_module(f"cli.{name}")
    raise AttributeError(name)

# Submodules are resolved lazily so ``cli.provision`` and ``cli.sensor`` stay
# module paths that tests can patch, and importing the package does not pull in
# the HTTP clients.

__all__ = []
