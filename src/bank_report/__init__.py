"""Bank telemarketing model report."""

from .runner import PIPELINE_ORDER, PipelineRunner, StageName

__version__ = "0.1.0"

__all__ = ["PIPELINE_ORDER", "PipelineRunner", "StageName", "__version__"]
