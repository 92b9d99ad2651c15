"""The upload type lattice.

Upload types form a DAG where each type can be coerced into any of its
ancestors. Each value in a CSV file is classified as the most specific type
that accepts it, and a column's type is the lowest common ancestor of the
types of its values::

                 text
                  |
             varchar-255 ─────────────┐
           /     /     \\              |
      boolean  float   datetime   offset-datetime
         |       |        |
         |      int      date
         |     /   \\
         |    /     \\
     boolean-or-int  auto-incrementing-int-pk

``boolean-or-int`` has two parents. A value can have that type but a column
cannot: a column holding only ``0``/``1`` values is stored as boolean.
"""

from __future__ import annotations

from enum import Enum

import networkx as nx

from tabular_uploads.core.errors import InternalConsistencyError


class UploadType(str, Enum):
    """Value and column types, declared from most to least specific."""

    BOOLEAN_OR_INT = "boolean-or-int"
    AUTO_INCREMENTING_INT_PK = "auto-incrementing-int-pk"
    INT = "int"
    DATE = "date"
    BOOLEAN = "boolean"
    OFFSET_DATETIME = "offset-datetime"
    DATETIME = "datetime"
    FLOAT = "float"
    VARCHAR_255 = "varchar-255"
    TEXT = "text"


# (child, parent) pairs; a child can always be relaxed to its parent
GENERALIZES: list[tuple[UploadType, UploadType]] = [
    (UploadType.BOOLEAN_OR_INT, UploadType.BOOLEAN),
    (UploadType.BOOLEAN_OR_INT, UploadType.INT),
    (UploadType.AUTO_INCREMENTING_INT_PK, UploadType.INT),
    (UploadType.INT, UploadType.FLOAT),
    (UploadType.DATE, UploadType.DATETIME),
    (UploadType.BOOLEAN, UploadType.VARCHAR_255),
    (UploadType.OFFSET_DATETIME, UploadType.VARCHAR_255),
    (UploadType.DATETIME, UploadType.VARCHAR_255),
    (UploadType.FLOAT, UploadType.VARCHAR_255),
    (UploadType.VARCHAR_255, UploadType.TEXT),
]

# Types without a database counterpart, mapped to their concrete ancestor
ABSTRACT_TO_CONCRETE: dict[UploadType, UploadType] = {
    UploadType.BOOLEAN_OR_INT: UploadType.BOOLEAN,
}

# Never inferred from values, only assigned to generated columns
NON_INFERABLE_TYPES: frozenset[UploadType] = frozenset({UploadType.AUTO_INCREMENTING_INT_PK})


class TypeLattice:
    """Immutable index over the generalization DAG.

    Precomputes the canonical most-specific-first order and, for every
    type, its ancestors in that order. Walks from specific to general must
    use ``sorted_types`` so that ties resolve the same way every time.
    """

    def __init__(
        self,
        types: list[UploadType],
        edges: list[tuple[UploadType, UploadType]],
        abstract_to_concrete: dict[UploadType, UploadType],
    ):
        graph: nx.DiGraph = nx.DiGraph()  # type: ignore[type-arg]
        graph.add_nodes_from(types)
        graph.add_edges_from(edges)

        if not nx.is_directed_acyclic_graph(graph):
            raise InternalConsistencyError("Upload type hierarchy contains a cycle")

        roots = [t for t in types if graph.out_degree(t) == 0]
        if len(roots) != 1:
            raise InternalConsistencyError(
                f"Upload type hierarchy must have exactly one root, found {roots}"
            )

        declaration_index = {t: i for i, t in enumerate(types)}
        self.root: UploadType = roots[0]
        self.sorted_types: tuple[UploadType, ...] = tuple(
            nx.lexicographical_topological_sort(graph, key=declaration_index.__getitem__)
        )
        position = {t: i for i, t in enumerate(self.sorted_types)}
        self._ancestors: dict[UploadType, tuple[UploadType, ...]] = {
            t: tuple(sorted(nx.descendants(graph, t), key=position.__getitem__))
            for t in self.sorted_types
        }
        self._abstract_to_concrete = dict(abstract_to_concrete)
        self.column_types: frozenset[UploadType] = frozenset(
            t for t in self.sorted_types if t not in self._abstract_to_concrete
        )

    def ancestors(self, upload_type: UploadType) -> tuple[UploadType, ...]:
        """All generalizations of a type, closest first."""
        return self._ancestors[upload_type]

    def column_type(self, value_type: UploadType | None) -> UploadType:
        """The most specific column type for a value type.

        A column we know nothing about (every value blank) is treated as text.
        """
        if value_type is None:
            return self.root
        return self._abstract_to_concrete.get(value_type, value_type)


LATTICE = TypeLattice(list(UploadType), GENERALIZES, ABSTRACT_TO_CONCRETE)

VALUE_TYPES = LATTICE.sorted_types
COLUMN_TYPES = LATTICE.column_types
