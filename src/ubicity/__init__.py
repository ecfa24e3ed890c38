"""UbiCity: privacy-aware analytics for informal learning journals."""

from .mapper import MapperReport, UrbanKnowledgeMapper

__all__ = ["MapperReport", "UrbanKnowledgeMapper"]

__version__ = "0.1.0"
