"""Property registries and the dotted-key flatten helper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, TYPE_CHECKING

from .descriptor import PropertyDescriptor
from .errors import (
    AmbiguousPropertyCollisionError,
    DuplicatePropertyError,
    InvalidPrefixError,
    RegistryFrozenError,
)

if TYPE_CHECKING:
    from .composite import CompositeConfig
    from .layers import SourceLayer

PREFIX_DELIMITER = "."

SubConfigBuilder = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class SubConfigSpec:
    """A composite value built from already resolved properties."""

    name: str
    builder: SubConfigBuilder
    properties: tuple[str, ...] = ()


def _validate_prefix(prefix: str) -> str:
    if not isinstance(prefix, str) or not prefix:
        raise InvalidPrefixError(str(prefix), "prefix must be a non-empty string")
    if not prefix.endswith(PREFIX_DELIMITER):
        raise InvalidPrefixError(prefix, f"prefix must end with '{PREFIX_DELIMITER}'")
    if prefix.endswith(PREFIX_DELIMITER * 2) or prefix == PREFIX_DELIMITER:
        raise InvalidPrefixError(prefix, f"prefix must end with a single '{PREFIX_DELIMITER}'")
    if any(char.isspace() for char in prefix):
        raise InvalidPrefixError(prefix, "prefix must not contain whitespace")
    return prefix.lower()


class PropertyRegistry:
    """An ordered set of property descriptors under one namespace prefix.

    A registry may name a ``parent`` whose descriptors it inherits by
    reference; the shared registry is the parent of both the input and the
    output registries. Inherited properties are looked up under this
    registry's prefix first and under the parent's prefix second.

    Registries are populated once and then frozen. A frozen registry is
    never mutated, so it can be shared across concurrent resolution calls.
    """

    def __init__(
        self,
        prefix: str,
        parent: Optional["PropertyRegistry"] = None,
        label: str = "",
    ) -> None:
        self.prefix = _validate_prefix(prefix)
        self.parent = parent
        self.label = label or self.prefix.rstrip(PREFIX_DELIMITER)
        self._descriptors: Dict[str, PropertyDescriptor] = {}
        self._sub_configs: Dict[str, SubConfigSpec] = {}
        self._frozen = False

    def __repr__(self) -> str:
        parent = f", parent={self.parent.prefix!r}" if self.parent else ""
        return f"PropertyRegistry(prefix={self.prefix!r}{parent}, properties={len(self._descriptors)})"

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------
    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "PropertyRegistry":
        self._frozen = True
        return self

    def ancestors(self) -> Iterator["PropertyRegistry"]:
        registry = self.parent
        while registry is not None:
            yield registry
            registry = registry.parent

    def register(
        self, descriptor: PropertyDescriptor, override: bool = False
    ) -> PropertyDescriptor:
        """Add ``descriptor`` to this registry.

        ``override=True`` lets a local declaration shadow an inherited one of
        the same value type; without it, redeclaring an inherited name is a
        duplicate.
        """
        if self._frozen:
            raise RegistryFrozenError(self.prefix)
        name = descriptor.name
        if name in self._descriptors:
            raise DuplicatePropertyError(name, self.prefix)

        inherited = self.parent.lookup(name) if self.parent is not None else None
        if inherited is not None:
            if not override:
                raise DuplicatePropertyError(name, self.parent.prefix)
            if inherited.value_type is not descriptor.value_type:
                raise AmbiguousPropertyCollisionError(
                    self.fully_qualified_name(name),
                    inherited.value_type,
                    descriptor.value_type,
                )
        elif override:
            raise ValueError(f"Property '{name}' does not override an inherited property")

        self._check_fully_qualified_collision(descriptor)
        self._descriptors[name] = descriptor
        return descriptor

    def _check_fully_qualified_collision(self, descriptor: PropertyDescriptor) -> None:
        fqn = self.fully_qualified_name(descriptor)
        for registry in (self, *self.ancestors()):
            for existing in registry._descriptors.values():
                if registry.fully_qualified_name(existing) != fqn:
                    continue
                if existing.value_type is not descriptor.value_type:
                    raise AmbiguousPropertyCollisionError(
                        fqn, existing.value_type, descriptor.value_type
                    )
                raise DuplicatePropertyError(descriptor.name, registry.prefix)

    def add_sub_config(
        self,
        name: str,
        builder: SubConfigBuilder,
        properties: Sequence[str] = (),
    ) -> None:
        if self._frozen:
            raise RegistryFrozenError(self.prefix)
        if name in self._sub_configs:
            raise DuplicatePropertyError(name, self.prefix)
        missing = [prop for prop in properties if self.lookup(prop) is None]
        if missing:
            raise KeyError(f"Sub-config '{name}' uses undeclared properties: {', '.join(missing)}")
        self._sub_configs[name] = SubConfigSpec(name, builder, tuple(properties))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def lookup(self, name: str) -> Optional[PropertyDescriptor]:
        """Return the descriptor visible under ``name``, local ones first."""
        key = name.lower()
        if key in self._descriptors:
            return self._descriptors[key]
        if self.parent is not None:
            return self.parent.lookup(key)
        return None

    def get(self, name: str) -> PropertyDescriptor:
        descriptor = self.lookup(name)
        if descriptor is None:
            raise KeyError(name)
        return descriptor

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self.descriptors())

    def __len__(self) -> int:
        return len(self.descriptors())

    def declares(self, name: str) -> bool:
        return name.lower() in self._descriptors

    def descriptors(self) -> List[PropertyDescriptor]:
        """Local declarations in order, followed by non-shadowed inherited ones."""
        ordered = list(self._descriptors.values())
        if self.parent is not None:
            ordered.extend(
                descriptor
                for descriptor in self.parent.descriptors()
                if descriptor.name not in self._descriptors
            )
        return ordered

    def sub_configs(self) -> List[SubConfigSpec]:
        inherited = self.parent.sub_configs() if self.parent is not None else []
        local = list(self._sub_configs.values())
        return [spec for spec in inherited if spec.name not in self._sub_configs] + local

    def fully_qualified_name(self, descriptor: PropertyDescriptor | str) -> str:
        name = descriptor if isinstance(descriptor, str) else descriptor.name
        return self.prefix + name.lower()

    def candidate_names(self, name: str) -> List[str]:
        """Fully-qualified names for ``name`` in specificity order.

        This registry's own prefix comes first, then the prefix of every
        ancestor that can still see the property.
        """
        key = name.lower()
        if self.lookup(key) is None:
            raise KeyError(name)
        candidates = [self.fully_qualified_name(key)]
        for registry in self.ancestors():
            if registry.lookup(key) is None:
                break
            candidates.append(registry.fully_qualified_name(key))
        return candidates

    def resolve_against(self, layers: Sequence["SourceLayer"]) -> "CompositeConfig":
        from .resolver import ConfigResolver

        return ConfigResolver(self).resolve(layers)


def flatten(
    nested: Mapping[str, Any], prefix: str = "", keep_branches: bool = False
) -> Dict[str, Any]:
    """Flatten nested dict to dotpath map.

    With ``keep_branches`` every nested object is also kept whole under its
    own dotpath, so a document-valued property such as a shard key can still
    be looked up by its name.
    """
    items: Dict[str, Any] = {}
    for key, value in nested.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            if keep_branches:
                items[full_key] = value
            items.update(flatten(value, full_key, keep_branches))
        else:
            items[full_key] = value
    return items
