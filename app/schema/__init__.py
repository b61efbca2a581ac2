"""ORM models; importing this package registers every table on Base.metadata."""

from .content import Listing, NewsArticle
from .jobs import ContentAIImprovement

__all__ = ["ContentAIImprovement", "Listing", "NewsArticle"]
