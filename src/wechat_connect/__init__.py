"""WeChat OAuth2 login and official-account webhook service."""

__version__ = "0.1.0"
