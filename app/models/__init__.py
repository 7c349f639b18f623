from app.models.analysis import Analysis
from app.models.client import Client
from app.models.keyword import Keyword

__all__ = [
    "Analysis",
    "Client",
    "Keyword",
]
