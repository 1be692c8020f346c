"""
Word Record Model

The document persisted once per hour bucket. Field names on the wire are
fixed (``word``, ``createdAt``, ``source``, ``dictionaryVersion``, ``hash``)
so every client reads what any other client wrote.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class WordRecord:
    """Write-once record holding the obfuscated word for one hour bucket."""
    word: str
    created_at: str
    source: str
    dictionary_version: str
    hash: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        doc = {
            'word': self.word,
            'createdAt': self.created_at,
            'source': self.source,
            'dictionaryVersion': self.dictionary_version,
        }
        if self.hash is not None:
            doc['hash'] = self.hash
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "WordRecord":
        """Build a record from a raw store document without validating it."""
        return cls(
            word=doc.get('word'),
            created_at=doc.get('createdAt'),
            source=doc.get('source'),
            dictionary_version=doc.get('dictionaryVersion'),
            hash=doc.get('hash'),
        )
