"""Version-control repository discovery and boundary checks."""

from src.repository.detector import RepositoryDetector
from src.repository.models import Repository, RepositoryScan

__all__ = ["RepositoryDetector", "Repository", "RepositoryScan"]
