__all__ = ["tree"]
