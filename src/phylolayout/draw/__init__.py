__all__ = [
    "backend",
    "cladogram",
    "coordinates",
    "layout_config",
    "metrics",
    "tanglegram",
]
