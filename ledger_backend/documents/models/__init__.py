"""
PATH: documents/models/__init__.py

Documents models export surface.
"""

from .document import Document, DocumentLine
from .document_type import DocumentType
from .installment import Installment

__all__ = [
    "Document",
    "DocumentLine",
    "DocumentType",
    "Installment",
]
