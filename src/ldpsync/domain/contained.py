"""Child resources owned by a parent resource.

A resource type declares its children once, as a class-level table of
``ChildReflection`` entries (see ``contains``). ``registry_for`` resolves that
table per type, merging declarations inherited from base classes. Each
resource instance then owns a ``ContainedChildren`` mapping that builds child
objects on first access.

A child's URI is always ``<parent uri>/<slug>`` and only exists once the parent
has an identity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, ClassVar, Protocol

from ldpsync.domain.attributes import TrackedAttributes
from ldpsync.domain.errors import (
    DeclarationError,
    FrozenResourceError,
    IdentityError,
    UnknownChildError,
)
from ldpsync.domain.handle import ResourceHandle

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from ldpsync.domain.attributes import Values
    from ldpsync.domain.change_set import AttributeValue, ChangeSet

DEFAULT_MIME_TYPE = "application/octet-stream"


class CreationPolicy(StrEnum):
    EAGER = "eager"
    LAZY = "lazy"


@dataclass(eq=False, kw_only=True)
class ContainedResource(ABC):
    """Base for children; identity derives from the parent handle."""

    KIND: ClassVar[str]

    slug: str
    policy: CreationPolicy = CreationPolicy.LAZY
    anonymous: bool = False
    dirty: bool = False
    handle: ResourceHandle = field(default_factory=ResourceHandle, repr=False)
    _parent: ResourceHandle = field(default_factory=ResourceHandle, repr=False)
    _frozen: bool = field(default=False, init=False, repr=False)

    @property
    def has_identity(self) -> bool:
        return self._parent.uri is not None

    @property
    def uri(self) -> str:
        if self._parent.uri is None:
            raise IdentityError(f"Contained resource {self.slug!r} has no parent identity yet")
        return self._parent.child(self.slug)

    @property
    def is_new(self) -> bool:
        return self.handle.is_new

    @property
    @abstractmethod
    def has_content(self) -> bool: ...

    def derive_identity(self) -> str:
        uri = self.uri
        self.handle.uri = uri
        return uri

    def _guard(self) -> None:
        if self._frozen:
            raise FrozenResourceError(
                f"Contained resource {self.slug!r} belongs to a destroyed resource"
            )

    # Friend primitives (called by the persistence coordinator)
    def _confirm(self, *, version: str | None = None) -> None:
        self.handle.confirm(self.derive_identity(), version=version)
        self.dirty = False

    def _freeze(self) -> None:
        self._frozen = True


@dataclass(eq=False, kw_only=True)
class AttachedFile(ContainedResource):
    """Binary child; saved by full replacement."""

    KIND: ClassVar[str] = "file"

    content: bytes | None = None
    mime_type: str = DEFAULT_MIME_TYPE
    original_name: str | None = None

    @property
    def has_content(self) -> bool:
        return self.content is not None

    def set_content(
        self,
        content: bytes | str,
        *,
        mime_type: str | None = None,
        original_name: str | None = None,
    ) -> None:
        self._guard()
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        if mime_type is not None:
            self.mime_type = mime_type
        if original_name is not None:
            self.original_name = original_name
        self.dirty = True

    def _load(self, content: bytes, *, mime_type: str | None, version: str | None) -> None:
        self.content = content
        self.mime_type = mime_type or DEFAULT_MIME_TYPE
        self._confirm(version=version)


@dataclass(eq=False, kw_only=True)
class ContainedSource(ContainedResource):
    """Structured child; saved by diff like its parent."""

    KIND: ClassVar[str] = "source"

    _attributes: TrackedAttributes = field(
        default_factory=TrackedAttributes, init=False, repr=False
    )

    @property
    def has_content(self) -> bool:
        return bool(self._attributes.as_dict())

    @property
    def attributes(self) -> dict[str, Values]:
        return self._attributes.as_dict()

    @property
    def baseline(self) -> dict[str, Values]:
        return self._attributes.baseline

    def __getitem__(self, key: str) -> Values:
        return self._attributes.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        self._guard()
        self._attributes.set(key, value)
        self.dirty = True

    def first(self, key: str) -> AttributeValue | None:
        return self._attributes.first(key)

    def change_set(self) -> ChangeSet:
        return self._attributes.change_set()

    def _commit(self, *, version: str | None = None) -> None:
        self._attributes.commit()
        self._confirm(version=version)

    def _load(
        self,
        attributes: Mapping[str, Iterable[AttributeValue]],
        *,
        version: str | None,
    ) -> None:
        self._attributes.load(attributes)
        self._confirm(version=version)


@dataclass(frozen=True, slots=True)
class ChildReflection:
    """Declared child: slug, concrete kind, creation policy and an optional class hint."""

    slug: str
    kind: type[ContainedResource] = AttachedFile
    policy: CreationPolicy = CreationPolicy.LAZY
    class_hint: str | None = None
    anonymous: bool = False

    def build(self, parent: ResourceHandle) -> ContainedResource:
        return self.kind(
            slug=self.slug, policy=self.policy, anonymous=self.anonymous, _parent=parent
        )


def contains(
    slug: str | None,
    *,
    kind: type[ContainedResource] | None = None,
    policy: CreationPolicy | str = CreationPolicy.LAZY,
    class_hint: str | None = None,
) -> ChildReflection:
    """Declare a contained resource for use in a ``Resource.CONTAINS`` table."""

    if slug is None or not str(slug).strip():
        raise DeclarationError("You must provide a slug for the contained resource")
    if "/" in slug:
        raise DeclarationError(f"Contained resource slug may not contain '/': {slug!r}")
    resolved_kind = AttachedFile if kind is None else kind
    if not (isinstance(resolved_kind, type) and issubclass(resolved_kind, ContainedResource)):
        raise DeclarationError(
            f"Contained resource {slug!r} needs a ContainedResource kind, got {resolved_kind!r}"
        )
    try:
        resolved_policy = CreationPolicy(policy)
    except ValueError as exc:
        raise DeclarationError(f"Unknown creation policy for {slug!r}: {policy!r}") from exc
    return ChildReflection(
        slug=slug, kind=resolved_kind, policy=resolved_policy, class_hint=class_hint
    )


class ContainedResourceRegistry:
    """Ordered ``slug -> ChildReflection`` table for one resource type."""

    def __init__(self, reflections: Iterable[ChildReflection] = ()) -> None:
        self._reflections: dict[str, ChildReflection] = {}
        for reflection in reflections:
            self._reflections[reflection.slug] = reflection

    def __contains__(self, slug: object) -> bool:
        return slug in self._reflections

    def __iter__(self) -> Iterator[ChildReflection]:
        return iter(self._reflections.values())

    def __len__(self) -> int:
        return len(self._reflections)

    def reflection(self, slug: str) -> ChildReflection | None:
        return self._reflections.get(slug)

    @property
    def slugs(self) -> tuple[str, ...]:
        return tuple(self._reflections)

    def declared_children(self) -> frozenset[str]:
        return frozenset(self._reflections)


@cache
def registry_for(resource_type: type) -> ContainedResourceRegistry:
    """Resolve the ``CONTAINS`` declarations of a type and its bases, base first."""

    reflections: list[ChildReflection] = []
    for klass in reversed(resource_type.__mro__):
        declared: tuple[ChildReflection, ...] = klass.__dict__.get("CONTAINS", ())
        for reflection in declared:
            if not isinstance(reflection, ChildReflection):
                raise DeclarationError(
                    f"{klass.__name__}.CONTAINS entries must come from contains(), "
                    f"got {reflection!r}"
                )
            reflections.append(reflection)
    return ContainedResourceRegistry(reflections)


def declared_children(resource_type: type) -> frozenset[str]:
    return registry_for(resource_type).declared_children()


class ContainedChildren(Mapping[str, ContainedResource]):
    """Per-instance view of a parent's children.

    Iteration yields only *present* children: eager ones, lazily declared ones
    that received content or exist remotely, and ad-hoc attachments. Declared
    order comes first, ad-hoc children follow in attachment order.
    """

    def __init__(self, registry: ContainedResourceRegistry, parent: ResourceHandle) -> None:
        self._registry = registry
        self._parent = parent
        self._built: dict[str, ContainedResource] = {}
        self._adhoc: dict[str, ChildReflection] = {}
        self._frozen = False
        for reflection in registry:
            if reflection.policy is CreationPolicy.EAGER:
                self._build(reflection)

    def __getitem__(self, slug: str) -> ContainedResource:
        child = self._built.get(slug)
        if child is None or not _is_present(child):
            raise KeyError(slug)
        return child

    def __iter__(self) -> Iterator[str]:
        return iter(self.materialize())

    def __len__(self) -> int:
        return len(self.materialize())

    def child(self, slug: str) -> ContainedResource:
        """Return the child for ``slug``, building a declared one on first access."""

        built = self._built.get(slug)
        if built is not None:
            return built
        reflection = self._registry.reflection(slug) or self._adhoc.get(slug)
        if reflection is None:
            raise UnknownChildError(slug)
        return self._build(reflection)

    def attach_file(
        self,
        slug: str,
        content: bytes | str,
        *,
        mime_type: str | None = None,
        original_name: str | None = None,
    ) -> AttachedFile:
        """Assign file content, declaring a single-use reflection when ``slug`` is unknown."""

        if self._frozen:
            raise FrozenResourceError(f"Cannot attach {slug!r} to a destroyed resource")
        if slug not in self._registry and slug not in self._adhoc:
            declared = contains(slug)
            self._adhoc[slug] = ChildReflection(slug=declared.slug, anonymous=True)
        child = self.child(slug)
        if not isinstance(child, AttachedFile):
            raise TypeError(f"Contained resource {slug!r} is a {child.KIND}, not a file")
        child.set_content(content, mime_type=mime_type, original_name=original_name)
        return child

    def materialize(self) -> dict[str, ContainedResource]:
        ordered = [*self._registry.slugs, *self._adhoc]
        return {
            slug: self._built[slug]
            for slug in ordered
            if slug in self._built and _is_present(self._built[slug])
        }

    def changed(self) -> dict[str, ContainedResource]:
        """Present children with local edits or not yet created remotely."""

        return {
            slug: child
            for slug, child in self.materialize().items()
            if child.dirty or child.is_new
        }

    @property
    def declared(self) -> dict[str, ContainedResource]:
        """Present children that come from the type declaration (not ad-hoc)."""

        return {slug: c for slug, c in self.materialize().items() if slug in self._registry}

    def _build(self, reflection: ChildReflection) -> ContainedResource:
        child = reflection.build(self._parent)
        if self._frozen:
            child._freeze()  # noqa: SLF001
        self._built[reflection.slug] = child
        return child

    # Friend primitives (called by the owning resource / coordinator)
    def _adopt(self, slug: str) -> ContainedResource:
        """Return the child for a slug the repository reports as existing."""

        if slug not in self._registry and slug not in self._adhoc:
            self._adhoc[slug] = ChildReflection(slug=slug, kind=AttachedFile, anonymous=True)
        return self.child(slug)

    def _freeze(self) -> None:
        self._frozen = True
        for child in self._built.values():
            child._freeze()  # noqa: SLF001


def _is_present(child: ContainedResource) -> bool:
    return (
        child.policy is CreationPolicy.EAGER
        or child.anonymous
        or child.has_content
        or not child.is_new
    )


class HasContainedChildren(Protocol):
    """Anything exposing a ``contained`` mapping (resources)."""

    @property
    def contained(self) -> ContainedChildren: ...


def materialize(parent: HasContainedChildren) -> dict[str, ContainedResource]:
    return parent.contained.materialize()


def changed_children(parent: HasContainedChildren) -> dict[str, ContainedResource]:
    return parent.contained.changed()
