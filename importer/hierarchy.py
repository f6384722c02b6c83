"""
Resolution of nested SPL sections into ordered parent/child edges.

An SPL section holds its subsections in ``component`` elements:

.. code-block:: XML

    <section>
        <id root="..."/>
        <component>
            <section><id root="A"/>...</section>
        </component>
        <component>
            <section><id root="B"/>...</section>
        </component>
    </section>

For every parent section the resolver makes sure a
:class:`~labels.models.SectionHierarchy` edge exists to each child, with
``sequence_number`` giving the child's position. Two strategies do this:

- :class:`IncrementalStrategy` resolves and links one child at a time, about
  three store round trips per child.
- :class:`BatchStrategy` has the whole subtree persisted in one pass and then
  links every level with a bulk lookup and a single bulk insert.

Both only ever insert missing edges, so running either of them again over the
same document creates nothing new.
"""
from __future__ import annotations

import logging
import uuid
from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

from lxml import etree

from common.util import parse_nullable_uuid
from importer.context import ParseContext
from importer.exceptions import ImporterError
from importer.exceptions import MalformedReferenceError
from importer.exceptions import MissingContextError
from importer.exceptions import StoreError
from importer.namespaces import Tags
from importer.results import ParseResult
from labels.models import Section
from labels.models import SectionHierarchy

if TYPE_CHECKING:
    from importer.sections import SectionParser

logger = logging.getLogger(__name__)


def child_section_elements(element: etree._Element) -> Iterator[etree._Element]:
    """Yields the ``component/section`` children of an element in document
    order."""
    for component in Tags.COMPONENT.children(element):
        section = Tags.SECTION.child(component)
        if section is not None:
            yield section


def section_natural_key(element: etree._Element) -> uuid.UUID:
    """
    Returns the natural key of a section element, the GUID in its
    ``id/@root``.

    Raises :class:`MalformedReferenceError` if there is no id or it is not a
    (non-nil) GUID.
    """
    id_element = Tags.ID.child(element)
    root = id_element.get("root") if id_element is not None else None
    key = parse_nullable_uuid(root)
    if key is None or key.int == 0:
        raise MalformedReferenceError(f"Section id {root!r} is not a valid GUID")
    return key


class HierarchyStrategy(ABC):
    """
    Links the children of one parent section.

    Implementations receive a persisted parent and its source element and
    add the edges they create to the result they are given. They insert
    only the edges that are missing and raise :class:`StoreError` if the
    store fails.
    """

    def __init__(self, content_parser: SectionParser):
        self.content_parser = content_parser

    @abstractmethod
    def link_children(
        self,
        parent: Section,
        element: etree._Element,
        context: ParseContext,
        result: ParseResult,
    ) -> ParseResult:
        """
        Link the children of ``parent``, adding counts and errors to
        ``result`` as they happen so they survive a :class:`StoreError`.
        """


class IncrementalStrategy(HierarchyStrategy):
    """
    Resolve each child section and link it before moving to the next one.

    Each child is handed to the content parser, which persists it and its own
    subtree depth-first. The child is then looked up by natural key and an
    edge is created unless one exists. A child that fails to resolve is left
    unlinked and its siblings carry on.

    The sequence number of a new edge is the number of children already
    linked below this parent in this pass plus one, so a fresh parent gets
    1, 2, 3... in document order.
    """

    def link_children(self, parent, element, context, result):
        document = context.require_document()
        store = context.store
        linked = 0

        for child_element in child_section_elements(element):
            child, child_result = self.content_parser.resolve_child_section(
                child_element,
                context,
            )
            result.merge(child_result)
            if child is None:
                logger.warning(
                    "Skipping hierarchy edge below section %s, child failed to resolve",
                    parent.pk,
                )
                continue

            key = section_natural_key(child_element)
            nodes = store.find_nodes_by_natural_keys(document, [key])
            if not nodes:
                logger.warning("Child section %s not found after parsing", key)
                continue
            child_id = nodes[0].pk

            existing = store.find_edges_by_parent_and_children(parent.pk, [child_id])
            if not existing:
                store.insert_edges(
                    [
                        SectionHierarchy(
                            parent_section_id=parent.pk,
                            child_section_id=child_id,
                            sequence_number=linked + 1,
                        ),
                    ],
                )
                result.edges_created += 1
                logger.debug(
                    "Created hierarchy edge %s -> %s #%d",
                    parent.pk,
                    child_id,
                    linked + 1,
                )
            linked += 1

        return result


class BatchStrategy(HierarchyStrategy):
    """
    Persist the whole subtree first, then link every level of it in bulk.

    The content parser is called once for the subtree below ``parent``. The
    natural keys of all sections in the subtree are then resolved to ids with
    one lookup, existing edges are read once per parent, and every missing
    edge is written with a single bulk insert.

    Sequence numbers are assigned by sorting each parent's children by their
    persisted id and numbering them from 1. On a fresh store ids are handed
    out in document order, so this matches :class:`IncrementalStrategy`. When
    some children were persisted by an earlier run the id order is kept
    rather than the document order, which keeps re-runs deterministic.
    """

    def link_children(self, parent, element, context, result):
        document = context.require_document()
        store = context.store

        self.content_parser.resolve_subtree(element, context, deep=True, result=result)

        groups = self.collect_children(element)
        if not groups:
            return result

        keys = {key for _, child_keys in groups for key in child_keys}
        keys.update(parent_key for parent_key, _ in groups if parent_key is not None)
        ids_by_key: Dict[uuid.UUID, int] = {
            node.section_guid: node.pk
            for node in store.find_nodes_by_natural_keys(document, keys)
        }

        new_edges = []
        for parent_key, child_keys in groups:
            parent_id = parent.pk if parent_key is None else ids_by_key.get(parent_key)
            if parent_id is None:
                logger.warning("Parent section %s not found, skipping", parent_key)
                continue

            child_ids = set()
            for key in child_keys:
                if key in ids_by_key:
                    child_ids.add(ids_by_key[key])
                else:
                    logger.warning("Child section %s not found, skipping", key)
            child_ids.discard(parent_id)

            existing = {
                edge.child_section_id
                for edge in store.find_edges_by_parent_and_children(
                    parent_id,
                    child_ids,
                )
            }
            for sequence_number, child_id in enumerate(sorted(child_ids), start=1):
                if child_id in existing:
                    continue
                new_edges.append(
                    SectionHierarchy(
                        parent_section_id=parent_id,
                        child_section_id=child_id,
                        sequence_number=sequence_number,
                    ),
                )

        store.insert_edges(new_edges)
        result.edges_created += len(new_edges)
        logger.debug(
            "Bulk created %d hierarchy edges below section %s",
            len(new_edges),
            parent.pk,
        )
        return result

    def collect_children(
        self,
        element: etree._Element,
        parent_key: Optional[uuid.UUID] = None,
    ) -> List[Tuple[Optional[uuid.UUID], List[uuid.UUID]]]:
        """
        Returns ``(parent key, [child keys])`` for every section in the
        subtree that has child sections, children in document order.

        The root of the subtree has a ``None`` parent key. Sections whose id
        does not parse are left out together with their subtree, the same
        sections the content parser refuses to persist.
        """
        groups = []
        child_keys = []
        for child_element in child_section_elements(element):
            try:
                key = section_natural_key(child_element)
            except MalformedReferenceError as e:
                logger.debug("Not linking section: %s", e)
                continue
            child_keys.append(key)
            groups.extend(self.collect_children(child_element, key))

        if child_keys:
            groups.insert(0, (parent_key, child_keys))
        return groups


class SectionHierarchyResolver:
    """
    Creates the hierarchy edges below a persisted section.

    The strategy is picked per call from ``context.use_bulk_operations``.
    Both strategies leave the store with the same set of edges.
    """

    def __init__(self, content_parser: SectionParser):
        self.content_parser = content_parser
        self.incremental = IncrementalStrategy(content_parser)
        self.batch = BatchStrategy(content_parser)

    def get_strategy(self, context: ParseContext) -> HierarchyStrategy:
        return self.batch if context.use_bulk_operations else self.incremental

    def resolve_hierarchy(
        self,
        parent: Optional[Section],
        element: etree._Element,
        context: ParseContext,
    ) -> ParseResult:
        """
        Link every child section below ``parent``.

        Errors do not propagate: a missing parent or document, or a store
        failure, stops this call and is returned as an error in the result.
        """
        result = ParseResult()
        try:
            if parent is None or parent.pk is None:
                raise MissingContextError(
                    "No current section available for hierarchy parsing.",
                )
            strategy = self.get_strategy(context)
            with context.scoped(section=parent):
                strategy.link_children(parent, element, context, result)
        except StoreError as e:
            logger.exception(
                "Error processing section hierarchy for section %s",
                getattr(parent, "pk", None),
            )
            result.record_exception(e, "Error parsing section hierarchy")
        except ImporterError as e:
            logger.warning("Unable to resolve section hierarchy: %s", e)
            result.record_exception(e, "Error parsing section hierarchy")
        return result
