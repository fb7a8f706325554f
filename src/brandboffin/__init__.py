"""BrandBoffin: brand name and domain suggestion backend."""

__version__ = "0.3.0"
