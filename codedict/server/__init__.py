from .app import RegistryServer, create_app

__all__ = ["RegistryServer", "create_app"]
