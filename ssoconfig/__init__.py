"""Generate AWS CLI profiles for all accounts available through AWS SSO."""

__version__ = "0.1.0"
__all__ = ["__version__"]