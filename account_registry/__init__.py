"""
Account Registry

Authorized-account store with login history and an administrative audit
trail, served over a FastAPI admin API.
"""
__version__ = "1.0.0"
