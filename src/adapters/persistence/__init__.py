from .dynamodb_report_repository import DynamoDbReportRepository
from .in_memory_report_repository import InMemoryReportRepository
from .local_stop_directory import LocalStopDirectory

__all__ = [
    "DynamoDbReportRepository",
    "InMemoryReportRepository",
    "LocalStopDirectory",
]
