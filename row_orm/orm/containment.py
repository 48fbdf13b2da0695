"""Containment specs: parsing, merging and resolution into trees.

Raw input accepted by ``Query.contain()``::

    "author"
    "author.profile"
    ["author", {"comment": ["user"]}]
    {"article": {"fields": ["title", "author_id"], "sort": {"id": "DESC"}}}
    {"client": {"order": ["orderType"], "company": {"foreign_key": "organization_id"}}}

Raw input is parsed once into the tagged variants :class:`AssociationRef` /
:class:`AssociationWithOptions`, folded into canonical :class:`ContainSpec`
trees (which merge across ``contain()`` calls) and finally resolved against
a table into :class:`ContainNode` trees.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from row_orm.core.exceptions import ContainmentError
from row_orm.database.expressions import normalize_order

if TYPE_CHECKING:
    from row_orm.orm.association.base import Association
    from row_orm.orm.table import Table

CONFIG_KEYS = ("fields", "conditions", "sort", "foreign_key")


class ContainConfig(BaseModel):
    """Validated per-association overrides.

    ``fields=None`` selects the defaults, ``fields=False`` selects nothing.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    fields: list[str] | Literal[False] | None = None
    conditions: str | dict[str, Any] | list[Any] | None = None
    sort: str | list[str] | dict[str, str] | None = None
    foreign_key: str | None = None

    @field_validator("fields", mode="before")
    @classmethod
    def _single_field(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("sort")
    @classmethod
    def _valid_sort(cls, value: Any) -> Any:
        if value is not None:
            normalize_order(value)
        return value

    @classmethod
    def coerce(cls, config: ContainConfig | Mapping[str, Any] | None) -> ContainConfig:
        """Validate *config*, raising ContainmentError on invalid options."""
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        if not isinstance(config, Mapping):
            raise ContainmentError(f"options must be a mapping, got {type(config).__name__}")
        try:
            return cls.model_validate(dict(config))
        except ValidationError as exc:
            detail = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise ContainmentError(detail) from exc


@dataclass(frozen=True)
class AssociationRef:
    """A bare association name (possibly a dotted path)."""

    name: str


@dataclass(frozen=True)
class AssociationWithOptions:
    """An association name with raw options: nested names and/or config keys."""

    name: str
    options: Any


@dataclass(frozen=True)
class ContainSpec:
    """Canonical containment: config overrides plus named children."""

    name: str
    config: dict[str, Any] = field(default_factory=dict)
    children: dict[str, ContainSpec] = field(default_factory=dict)


@dataclass(frozen=True)
class ContainNode:
    """A containment spec resolved against its source table."""

    name: str
    instance: Association
    config: ContainConfig
    children: tuple[ContainNode, ...]
    spec: ContainSpec


ParsedItem = AssociationRef | AssociationWithOptions | ContainSpec


def parse_contain(raw: Any) -> list[ParsedItem]:
    """Parse raw containment input into tagged variants.

    Raises:
        ContainmentError: If *raw* has an unsupported shape.
    """
    if isinstance(raw, str):
        if not raw.strip():
            raise ContainmentError("association names cannot be empty")
        return [AssociationRef(raw.strip())]
    if isinstance(raw, ContainSpec):
        return [raw]
    if isinstance(raw, Mapping):
        items: list[ParsedItem] = []
        for name, options in raw.items():
            if not isinstance(name, str) or not name.strip():
                raise ContainmentError(f"association names must be non-empty strings, got {name!r}")
            if isinstance(options, ContainSpec):
                items.append(options)
            elif options is None:
                items.append(AssociationRef(name.strip()))
            else:
                items.append(AssociationWithOptions(name.strip(), options))
        return items
    if isinstance(raw, Sequence):
        items = []
        for item in raw:
            if isinstance(item, (str, Mapping, ContainSpec)):
                items.extend(parse_contain(item))
            else:
                raise ContainmentError(f"unsupported list item {item!r}")
        return items
    raise ContainmentError(f"unsupported containment {raw!r}")


def build_specs(raw: Any) -> dict[str, ContainSpec]:
    """Parse *raw* and fold it into canonical specs keyed by association name."""
    specs: dict[str, ContainSpec] = {}
    for item in parse_contain(raw):
        specs = merge_specs(specs, {_root_name(item): _to_spec(item)})
    return specs


def merge_specs(
    existing: Mapping[str, ContainSpec],
    incoming: Mapping[str, ContainSpec],
) -> dict[str, ContainSpec]:
    """Merge two spec mappings; incoming config keys win, children merge recursively."""
    merged = dict(existing)
    for name, spec in incoming.items():
        current = merged.get(name)
        if current is None:
            merged[name] = spec
        else:
            merged[name] = ContainSpec(
                name,
                {**current.config, **spec.config},
                merge_specs(current.children, spec.children),
            )
    return merged


def _root_name(item: ParsedItem) -> str:
    return item.name.split(".", 1)[0]


def _to_spec(item: ParsedItem) -> ContainSpec:
    if isinstance(item, ContainSpec):
        return item
    head, _, rest = item.name.partition(".")
    if rest:
        # "a.b.c" nests the remainder (and any options) under "a"
        tail = AssociationRef(rest) if isinstance(item, AssociationRef) else AssociationWithOptions(rest, item.options)
        return ContainSpec(head, {}, {_root_name(tail): _to_spec(tail)})
    if isinstance(item, AssociationRef):
        return ContainSpec(head)

    options = item.options
    if isinstance(options, (str, ContainSpec)) or (
        isinstance(options, Sequence) and not isinstance(options, Mapping)
    ):
        return ContainSpec(head, {}, build_specs(options))
    if not isinstance(options, Mapping):
        raise ContainmentError(f"unsupported options for '{head}': {options!r}")

    config: dict[str, Any] = {}
    children: dict[str, ContainSpec] = {}
    for key, value in options.items():
        if key in CONFIG_KEYS:
            config[key] = value
        elif key == "associations":
            children = merge_specs(children, build_specs(value))
        else:
            children = merge_specs(children, build_specs({key: value}))
    return ContainSpec(head, config, children)


def normalize(parent_table: Table, spec: ContainSpec) -> ContainNode:
    """Resolve *spec* against *parent_table*, recursing into the association target.

    Raises:
        UnknownAssociationError: If the table declares no such association.
        ContainmentError: If the spec's options are invalid.
    """
    instance = parent_table.association(spec.name)
    config = ContainConfig.coerce(spec.config)
    target = instance.target()
    children = tuple(normalize(target, child) for child in spec.children.values())
    return ContainNode(spec.name, instance, config, children, spec)


def normalize_tree(parent_table: Table, specs: Mapping[str, ContainSpec]) -> list[ContainNode]:
    return [normalize(parent_table, spec) for spec in specs.values()]
