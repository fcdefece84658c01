"""
Flat record exchange format.

This module provides:
- Decoding of wire elements into typed records
- The importer that rebuilds a question graph from records
- The exporter that flattens a question graph into records
- Identifier providers for freshly minted primary keys
"""

from .wire import (
    MODEL_NAMES,
    REQUIRED_MODELS,
    CriterionRecord,
    EdgeRecord,
    GraphRecord,
    LabelRecord,
    NodeRecord,
    QuestionRecord,
    RecordDecodeError,
    TagRecord,
    decode_record,
)
from .ids import IdentifierProvider, SequenceProvider, UUIDProvider
from .importer import (
    ImportResult,
    ImportWarning,
    StructuralValidationError,
    import_records,
    import_text,
    validate_structure,
)
from .exporter import ExportError, export_records, export_text

__all__ = [
    "MODEL_NAMES",
    "REQUIRED_MODELS",
    "CriterionRecord",
    "EdgeRecord",
    "GraphRecord",
    "LabelRecord",
    "NodeRecord",
    "QuestionRecord",
    "RecordDecodeError",
    "TagRecord",
    "decode_record",
    "IdentifierProvider",
    "SequenceProvider",
    "UUIDProvider",
    "ImportResult",
    "ImportWarning",
    "StructuralValidationError",
    "import_records",
    "import_text",
    "validate_structure",
    "ExportError",
    "export_records",
    "export_text",
]
