from .main import vibetravels

__all__ = ["vibetravels"]
