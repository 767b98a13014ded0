"""FastAPI dependencies for dependency injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from api.config import Settings, get_settings
from ontologizer.pipeline.processor import OntologizerProcessor

__all__ = ["SettingsDep", "ProcessorDep", "get_processor"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_processor() -> OntologizerProcessor:
    """Get the shared processor, wired from settings on first use."""
    return OntologizerProcessor.from_settings(get_settings())


ProcessorDep = Annotated[OntologizerProcessor, Depends(get_processor)]
