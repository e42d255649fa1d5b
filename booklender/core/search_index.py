import logging
from typing import List, Optional

from booklender.config import MAX_SUGGESTIONS
from booklender.core.catalog import Catalog
from booklender.core.models import Book
from booklender.utils.spelling import normalize_token, tokenize, find_closest_word

logger = logging.getLogger("search_index")


class SearchIndex:
    """
    Fuzzy search over the catalog.

    The term dictionary is built from every title and author once, at
    construction. Books added to the catalog afterwards contribute no terms
    until rebuild() is called; substring search itself always runs against
    the live catalog.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.dictionary: List[str] = []
        self._known = set()

        self.rebuild()

    # Build term dictionary from titles and authors
    def rebuild(self):
        terms = {}
        for book in self.catalog.all_books():
            for token in tokenize(book.title) + tokenize(book.author):
                terms.setdefault(token, None)

        self.dictionary = list(terms)
        self._known = set(self.dictionary)
        logger.info(f"Search dictionary built: {len(self.dictionary)} entries")

    def __len__(self) -> int:
        return len(self.dictionary)

    def __contains__(self, term) -> bool:
        return term in self._known

    def correct_spelling(self, query: Optional[str]) -> Optional[str]:
        """
        Replace unknown words with their closest dictionary term.

        Returns the corrected query, or None when nothing was changed.
        Known words, words of two characters or fewer, and words with no
        term within the edit distance limit are kept exactly as typed.
        """
        if not query:
            return None

        words = []
        corrected = False

        for word in query.split():
            clean = normalize_token(word)
            if clean and clean not in self._known:
                suggestion = find_closest_word(clean, self.dictionary)
                if suggestion is not None:
                    words.append(suggestion)
                    corrected = True
                    continue
            words.append(word)

        return " ".join(words) if corrected else None

    def smart_search(self, query: Optional[str]) -> List[Book]:
        if query is None or not query.strip():
            return []

        corrected = self.correct_spelling(query)
        final_query = corrected if corrected is not None else query

        logger.debug(f"Search for the final keywords: {final_query}")
        return self.catalog.search(final_query)

    # Prefix completion over dictionary terms
    def suggest(self, prefix: Optional[str]) -> List[str]:
        if prefix is None:
            return []

        prefix = prefix.lower()
        results = []
        for term in self.dictionary:
            if term.startswith(prefix):
                results.append(term)
                if len(results) >= MAX_SUGGESTIONS:
                    break
        return results
