from inventory.application.ports.unit_of_work import UnitOfWork
from inventory.application.ports.repositories import CompletionTrackerRepository, WorkItemRepository
from inventory.application.ports.runtime import FailureNotifier, NamedLock

__all__ = [
    "UnitOfWork",
    "WorkItemRepository",
    "CompletionTrackerRepository",
    "NamedLock",
    "FailureNotifier",
]
