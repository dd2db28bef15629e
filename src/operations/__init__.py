"""Planning and execution of file operations."""

from src.operations.executor import OperationExecutor
from src.operations.interfaces import IFileClassifier, IUsageDetector
from src.operations.models import (
    ExecutionResult,
    FileOperation,
    OperationPlan,
    OperationType,
)
from src.operations.planner import OperationPlanner

__all__ = [
    "OperationExecutor",
    "OperationPlanner",
    "ExecutionResult",
    "FileOperation",
    "OperationPlan",
    "OperationType",
    "IFileClassifier",
    "IUsageDetector",
]
