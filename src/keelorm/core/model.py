"""
Declarative entity base class.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator

from ..errors import MappingError
from ..mapping.description import EntityDescription, InheritanceType
from .fields import Column

_META_OPTIONS = (
    "table",
    "schema",
    "mapped_superclass",
    "inheritance",
    "discriminator_column",
    "discriminator_value",
)


class EntityMeta(type):
    """
    Metaclass recording declared columns and ``Meta`` options.

    It does no mapping; :meth:`Entity.describe` hands the recorded values to
    the mapping layer as an :class:`EntityDescription`.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "EntityMeta":
        meta = attrs.pop("Meta", None)
        cls = super().__new__(mcls, name, bases, attrs)

        declared = sorted(
            (value for value in attrs.values() if isinstance(value, Column)),
            key=lambda column: column.creation_counter,
        )
        cls._declared_columns = tuple(declared)

        options: Dict[str, Any] = {}
        if meta is not None:
            unknown = {key for key in vars(meta) if not key.startswith("__")} - set(_META_OPTIONS)
            if unknown:
                raise MappingError(
                    f"Unknown Meta option(s) on '{name}': {', '.join(sorted(unknown))}"
                )
            options = {key: getattr(meta, key) for key in _META_OPTIONS if hasattr(meta, key)}
        cls._meta_options = options
        cls._description = None
        return cls


class Entity(metaclass=EntityMeta):
    """
    Base class for declaratively mapped entities.

    Subclasses declare :class:`~keelorm.core.fields.Id` and
    :class:`~keelorm.core.fields.Column` attributes and optionally an inner
    ``Meta`` class::

        class Product(Entity):
            id = Id()
            name = Column(str, nullable=False)

            class Meta:
                table = "products"
    """

    def __init__(self, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}
        known = {column.require_name() for column in self.all_columns()}
        unknown = set(kwargs) - known
        if unknown:
            raise TypeError(
                f"{type(self).__name__} got unexpected field(s): {', '.join(sorted(unknown))}"
            )
        for key, value in kwargs.items():
            setattr(self, key, value)

    @classmethod
    def all_columns(cls) -> Iterator[Column]:
        """
        Columns declared on this class and its bases, base classes first.
        """
        seen: set[str] = set()
        chain = [klass for klass in reversed(cls.__mro__) if isinstance(klass, EntityMeta)]
        for klass in chain:
            for column in klass.__dict__.get("_declared_columns", ()):
                name = column.require_name()
                if name in seen:
                    continue
                seen.add(name)
                yield getattr(cls, name)

    @classmethod
    def describe(cls) -> EntityDescription:
        """
        Build (once) the :class:`EntityDescription` for this class.
        """
        cached = cls.__dict__.get("_description")
        if cached is not None:
            return cached
        if cls is Entity:
            raise MappingError("Entity itself cannot be described; subclass it.")

        options = cls._meta_options
        parent = None
        for base in cls.__bases__:
            if isinstance(base, EntityMeta) and base is not Entity:
                parent = base.describe()
                break

        mapped_superclass = bool(options.get("mapped_superclass", False))
        inheritance = options.get("inheritance")
        if isinstance(inheritance, str):
            try:
                inheritance = InheritanceType[inheritance.upper()]
            except KeyError as exc:
                raise MappingError(
                    f"Unknown inheritance type '{inheritance}' on '{cls.__name__}'"
                ) from exc

        description = EntityDescription(
            entity_type=cls,
            fields=tuple(column.describe() for column in cls._declared_columns),
            is_entity=not mapped_superclass,
            is_mapped_superclass=mapped_superclass,
            table=options.get("table"),
            schema=options.get("schema"),
            inheritance=inheritance,
            discriminator_column=options.get("discriminator_column"),
            discriminator_value=options.get("discriminator_value"),
            parent=parent,
        )
        cls._description = description
        return description

    def to_dict(self) -> Dict[str, Any]:
        names = [column.require_name() for column in self.all_columns()]
        return {name: getattr(self, name) for name in names}

    def __repr__(self) -> str:
        field_parts = ", ".join(
            f"{name}={value!r}" for name, value in self.__dict__.get("_field_values", {}).items()
        )
        return f"<{self.__class__.__name__} {field_parts}>"
