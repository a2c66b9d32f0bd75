"""
Practicum Services Package

Collaborators around the pure workflow core: configuration providers,
practice stores (in-memory and SQLAlchemy) and the workflow service
that callers use.
"""

from practicum.services.configuration import EnvConfigurationProvider, StaticConfigurationProvider
from practicum.services.memory import InMemoryPracticeStore
from practicum.services.practice_service import PracticeWorkflowService

__all__ = [
    "EnvConfigurationProvider",
    "StaticConfigurationProvider",
    "InMemoryPracticeStore",
    "PracticeWorkflowService",
]
