"""FastAPI dependencies and service composition."""

from .search import PipelineDep, RegistryDep, build_pipeline, build_registry, get_pipeline, get_registry

__all__ = [
    "PipelineDep",
    "RegistryDep",
    "build_pipeline",
    "build_registry",
    "get_pipeline",
    "get_registry",
]
