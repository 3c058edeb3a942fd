"""Symbol bindings: the document's single SymbolClass tag (character ID → class name)."""

from __future__ import annotations

import logging

from swfpatcher.models.document import Document, DoAbc, NamedId, ShowFrame, SymbolClass, TagModel

logger = logging.getLogger(__name__)


def script_insert_index(tags: list[TagModel]) -> int:
    """Position just after the last DoAbc; else before the first ShowFrame; else the end."""
    last_abc = None
    for i, tag in enumerate(tags):
        if isinstance(tag, DoAbc):
            last_abc = i
    if last_abc is not None:
        return last_abc + 1
    for i, tag in enumerate(tags):
        if isinstance(tag, ShowFrame):
            return i
    return len(tags)


def find_symbol_class(document: Document) -> SymbolClass | None:
    for tag in document.tags:
        if isinstance(tag, SymbolClass):
            return tag
    return None


def merge_symbol_bindings(document: Document, bindings: list[NamedId]) -> SymbolClass | None:
    """Merge bindings into the SymbolClass tag, creating it when absent.

    A new binding for an ID replaces that ID's previous binding in place;
    bindings for unseen IDs are appended in the given order.
    """
    if not bindings:
        return None

    symbol_class = find_symbol_class(document)
    if symbol_class is None:
        symbol_class = SymbolClass()
        document.tags.insert(script_insert_index(document.tags), symbol_class)
        logger.debug("Created SymbolClass tag")

    index = {s.id: i for i, s in enumerate(symbol_class.symbols)}
    for binding in bindings:
        entry = NamedId(id=binding.id, name=binding.name)
        if binding.id in index:
            symbol_class.symbols[index[binding.id]] = entry
        else:
            index[binding.id] = len(symbol_class.symbols)
            symbol_class.symbols.append(entry)
    logger.debug("Merged %d symbol bindings", len(bindings))
    return symbol_class
