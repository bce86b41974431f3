"""Component extraction & clipboard serialization engine.

Subpackages:
- tree: Layout tree model, locator, normalizer, and fallback synthesis
- integrations: WordPress REST fetcher and Figma clipboard conversion
- clipboard: Native builder clipboard envelope and multi-MIME clipboard items
- pipeline: Extraction orchestration, retry policy, and the validation cache
"""

from .errors import ErrorKind, ExtractionError
from .schemas import ConnectionConfig
from .service import ComponentCopyService, CopyResult, PasteTarget

__all__ = [
    "ComponentCopyService",
    "ConnectionConfig",
    "CopyResult",
    "ErrorKind",
    "ExtractionError",
    "PasteTarget",
]
