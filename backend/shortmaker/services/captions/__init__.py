"""Caption segmentation - words to pages."""

from .paginator import paginate

__all__ = ["paginate"]
