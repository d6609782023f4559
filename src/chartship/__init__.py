from .artifacts import Artifact, artifact_path, provenance_path
from .config import PipelineConfig
from .dag import TaskGraph
from .dsl import announce, command, task
from .invoker import CommandInvoker
from .model import BumpKind, ChartMetadata, ExecutionResult, SemVer, Task
from .pipeline import build_pipeline
from .publish import PublishCoordinator
from .versioning import ChartFile

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "artifact_path",
    "provenance_path",
    "PipelineConfig",
    "TaskGraph",
    "announce",
    "command",
    "task",
    "CommandInvoker",
    "BumpKind",
    "ChartMetadata",
    "ExecutionResult",
    "SemVer",
    "Task",
    "build_pipeline",
    "PublishCoordinator",
    "ChartFile",
]
