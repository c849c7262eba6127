"""Services layer for Nolo application logic."""

from .recording_service import RecordingService
from .conversation_service import ConversationService
from .pipeline_worker import PipelineWorker

__all__ = [
    "RecordingService",
    "ConversationService",
    "PipelineWorker",
]
