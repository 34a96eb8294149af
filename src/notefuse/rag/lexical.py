"""Lexical search: substring match over document title and body.

Documents come back in the store's natural order. There is no relevance
scoring beyond match / no match; the fusion ranker down-weights this channel.
"""

from __future__ import annotations

import logging

from notefuse.db.documents import DocumentStore
from notefuse.db.models import Document, SearchScope

logger = logging.getLogger(__name__)


class LexicalSearch:
    """Substring matcher over a DocumentStore.

    Args:
        documents: Store scanned for matches.
        case_sensitive: Match case exactly (default: case-insensitive).
    """

    def __init__(self, documents: DocumentStore, case_sensitive: bool = False) -> None:
        self._documents = documents
        self.case_sensitive = case_sensitive

    def search(
        self, query: str, limit: int, scope: SearchScope | None = None
    ) -> list[Document]:
        """Return up to *limit* documents whose title or body contains *query*.

        A blank query matches nothing.
        """
        if limit < 1 or not query.strip():
            return []

        needle = self._normalise(query)
        scope = scope or SearchScope()
        matches: list[Document] = []
        for doc in self._documents.scan(
            resource_type=scope.resource_type, owner_id=scope.owner_id
        ):
            if not scope.allows(doc.resource_id, doc.resource_type):
                continue
            if needle in self._normalise(doc.title) or needle in self._normalise(doc.body):
                matches.append(doc)
                if len(matches) >= limit:
                    break

        logger.debug("Lexical search %r matched %d document(s)", query, len(matches))
        return matches

    def _normalise(self, text: str | None) -> str:
        if not text:
            return ""
        return text if self.case_sensitive else text.casefold()
