from .settings import Config, YamlConfigSettingsSource, config

__all__ = ["Config", "YamlConfigSettingsSource", "config"]
