# drive_service/__init__.py
"""Personal cloud drive service"""
def __getattr__(name):
    if name == "__version__":
        from .config import settings
        return settings.VERSION
    raise AttributeError(name)
