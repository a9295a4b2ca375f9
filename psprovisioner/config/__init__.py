from .provider import ConfigProvider, EnvConfigProvider, RuntimeConfig

__all__ = ["ConfigProvider", "EnvConfigProvider", "RuntimeConfig"]
