# gestao/config/__init__.py
# Makes 'config' a package. Exports relevant items.

from .settings import config, Config, load_config, NfeSettings, FocusNfeEnvironment

__all__ = ["config", "Config", "load_config", "NfeSettings", "FocusNfeEnvironment"]
