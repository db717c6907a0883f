from .loader import DEFAULT_CONFIG_PATH, ReportConfig, load_config

__all__ = ["DEFAULT_CONFIG_PATH", "ReportConfig", "load_config"]
