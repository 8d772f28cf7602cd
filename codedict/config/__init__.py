from .core import (
    FPL_BOOTSTRAP_URL,
    RegistryColumns,
    RegistrySettings,
    FPLSettings,
    CrossRefSettings,
    TeamCodeSettings,
    StageSettings,
    ServerSettings,
    LoggingSettings,
    Settings,
    load_settings,
    last_yaml_path,
    _project_root,
)

__all__ = [
    "FPL_BOOTSTRAP_URL",
    "RegistryColumns",
    "RegistrySettings",
    "FPLSettings",
    "CrossRefSettings",
    "TeamCodeSettings",
    "StageSettings",
    "ServerSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
    "last_yaml_path",
    "_project_root",
]
