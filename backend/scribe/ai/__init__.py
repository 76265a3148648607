"""
AI model routing module.
Catalog of models, plan-aware selection and backend invocation.
"""
from scribe.ai.catalog import ModelCatalog, ModelDescriptor, build_default_catalog
from scribe.ai.selector import ModelSelector, ModelSelection, UpgradePrompt
from scribe.ai.invoker import SummaryInvoker, InvocationResult
from scribe.ai.base import SummaryBackend, BackendResponse

__all__ = [
    "ModelCatalog",
    "ModelDescriptor",
    "build_default_catalog",
    "ModelSelector",
    "ModelSelection",
    "UpgradePrompt",
    "SummaryInvoker",
    "InvocationResult",
    "SummaryBackend",
    "BackendResponse",
]
