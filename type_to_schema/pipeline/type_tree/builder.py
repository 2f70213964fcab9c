"""
Type tree builder.

Classifies a RawType into a TypeTree: known generic containers are
unwrapped into children, known primitives are tagged as such, tuple-shaped
inputs become Tuple nodes and everything else is an Object to be looked
up in the component registry.
"""

from __future__ import annotations

from ..errors import StructuralError
from .nodes import Container, RawType, TypeTree, ValueKind
from .primitives import PrimitiveMapper

VECTOR_IDENTIFIERS = {
    "Vec",
    "VecDeque",
    "LinkedList",
    "HashSet",
    "BTreeSet",
    "IndexSet",
    "SmallVec",
    "list",
    "List",
    "Sequence",
    "set",
    "Set",
    "frozenset",
    "FrozenSet",
}
MAP_IDENTIFIERS = {"HashMap", "BTreeMap", "Map", "IndexMap", "dict", "Dict", "Mapping"}
OPTIONAL_IDENTIFIERS = {"Option", "Optional"}
INDIRECTION_IDENTIFIERS = {"Box", "Cow", "Rc", "Arc", "RefCell", "Cell", "Mutex", "RwLock"}
TUPLE_IDENTIFIERS = {"tuple", "Tuple"}

# SmallVec<[T; N]> carries its element inside an array argument
_ARRAY_BACKED = {"SmallVec"}


class TypeTreeBuilder:
    """Builds TypeTrees from raw type descriptors."""

    def __init__(self, primitives: PrimitiveMapper | None = None):
        """
        Initialize the builder.

        Args:
            primitives: Mapper deciding which identifiers are primitive
        """
        self.primitives = primitives or PrimitiveMapper()

    def build(self, raw: RawType | str) -> TypeTree:
        """
        Build the TypeTree for one type occurrence.

        Args:
            raw: A RawType or its textual form

        Returns:
            The classified TypeTree

        Raises:
            StructuralError: If a container has the wrong number of arguments
        """
        if isinstance(raw, str):
            raw = RawType.parse(raw)

        if raw.is_tuple:
            return self._build_tuple(list(raw.members))

        container = self._container_for(raw.name)
        if container is not None:
            return self._build_container(raw, container)

        if raw.name in TUPLE_IDENTIFIERS:
            if not raw.args:
                raise StructuralError(f"'{raw.name}' requires at least one member type", str(raw))
            return self._build_tuple(list(raw.args))

        if self.primitives.is_primitive(raw.name):
            if raw.args:
                raise StructuralError(f"Primitive type '{raw.name}' does not take generic arguments", str(raw))
            return TypeTree(kind=ValueKind.PRIMITIVE, name=raw.name)

        return TypeTree(
            kind=ValueKind.OBJECT,
            name=raw.name,
            children=tuple(self.build(arg) for arg in raw.args),
        )

    def _container_for(self, name: str) -> Container | None:
        if name in VECTOR_IDENTIFIERS:
            return Container.VECTOR
        if name in MAP_IDENTIFIERS:
            return Container.MAP
        if name in OPTIONAL_IDENTIFIERS:
            return Container.OPTIONAL
        if name in INDIRECTION_IDENTIFIERS:
            return Container.INDIRECTION
        return None

    def _build_container(self, raw: RawType, container: Container) -> TypeTree:
        args = list(raw.args)
        if raw.name in _ARRAY_BACKED and len(args) == 1 and args[0].name == "Vec":
            args = list(args[0].args)

        if container == Container.MAP:
            if len(args) not in (1, 2):
                raise StructuralError(f"'{raw.name}' expects a value type and an optional key type, got {len(args)} argument(s)", str(raw))
            # Keys are always strings in the target schema model, only the value type is kept
            children = (self.build(args[-1]),)
        else:
            if len(args) != 1:
                raise StructuralError(f"'{raw.name}' expects exactly one generic argument, got {len(args)}", str(raw))
            children = (self.build(args[0]),)

        kind = ValueKind.OBJECT
        if container == Container.INDIRECTION and children[0].kind == ValueKind.PRIMITIVE:
            kind = ValueKind.PRIMITIVE
        return TypeTree(kind=kind, name=raw.name, container=container, children=children)

    def _build_tuple(self, members: list[RawType]) -> TypeTree:
        if len(members) == 1:
            return self.build(members[0])
        return TypeTree(
            kind=ValueKind.TUPLE,
            name="",
            children=tuple(self.build(member) for member in members),
        )
