"""
Graph Schema
============

Typed data models for the fragments a directed-graph document is made of.

Every model here is domain-agnostic: rules translate arbitrary domain
objects into these shapes, and the markup writer turns them into DGML.

Fragment kinds:
- Node: a vertex, identified by its id
- Link: a directed edge, identified by (source, target, category)
- Category: a classification tag, optionally based on a parent category
- Style: a conditional visual rule, never deduplicated
- PropertyDeclaration: registers the data type of a custom property
"""

from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
    model_validator,
)


PropertyValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]
"""Closed set of value kinds a property bag may hold."""

PROPERTY_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_.\-]*$"

PropertyName = Annotated[str, StringConstraints(pattern=PROPERTY_NAME_PATTERN)]
"""Property names become markup attribute names, so they must be XML names."""


DATA_TYPE_BY_PYTHON_TYPE: dict[type, str] = {
    bool: "System.Boolean",
    int: "System.Int32",
    float: "System.Double",
    str: "System.String",
}


def data_type_for(value: PropertyValue) -> str:
    """Return the declared data type name for a property value."""
    # bool must be looked up by exact type; it is a subclass of int.
    data_type = DATA_TYPE_BY_PYTHON_TYPE.get(type(value))
    if data_type is None:
        raise TypeError(f"Unsupported property value kind: {type(value).__name__}")
    return data_type


def format_value(value: PropertyValue) -> str:
    """Render a property value the way graph viewers expect it."""
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


class ElementKind(str, Enum):
    """Graph element kinds a Style can target."""

    NODE = "Node"
    LINK = "Link"


class PropertyBag(BaseModel):
    """Base model for elements that carry an open property mapping."""

    model_config = ConfigDict(frozen=False)

    properties: dict[PropertyName, PropertyValue] = Field(default_factory=dict)
    """Custom properties, serialized as extra attributes."""

    def has_property(self, name: str) -> bool:
        """Check if a property is set."""
        return name in self.properties

    def get_property(self, name: str, default: Any = None) -> Any:
        """Safely get a property value of any kind."""
        return self.properties.get(name, default)

    def get_str(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a string property, raising TypeError on another kind."""
        return self._typed(name, default, (str,), "str")

    def get_number(
        self, name: str, default: Optional[float] = None
    ) -> Optional[Union[int, float]]:
        """Get a numeric property. Booleans are not numbers here."""
        value = self.properties.get(name)
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(
                f"Property '{name}' holds {type(value).__name__}, expected a number"
            )
        return value

    def get_bool(self, name: str, default: Optional[bool] = None) -> Optional[bool]:
        """Get a boolean property, raising TypeError on another kind."""
        return self._typed(name, default, (bool,), "bool")

    def _typed(self, name: str, default: Any, kinds: tuple[type, ...], label: str) -> Any:
        value = self.properties.get(name)
        if value is None:
            return default
        if not isinstance(value, kinds):
            raise TypeError(
                f"Property '{name}' holds {type(value).__name__}, expected {label}"
            )
        return value


def _require_text(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    return value


class Node(PropertyBag):
    """
    A graph vertex.

    Examples
    --------
    >>> Node(id="billing", label="Billing Service", category="Service")
    """

    id: str
    label: Optional[str] = None
    category: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        return _require_text(value, "Node.id")

    @property
    def identity_key(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, label={self.label!r}, category={self.category!r})"


LinkKey = tuple[str, str, Optional[str]]


class Link(PropertyBag):
    """
    A directed edge between two node ids.

    The endpoints do not have to exist as nodes when the link is created;
    the markup writer reconciles missing endpoints.
    """

    source: str
    target: str
    category: Optional[str] = None
    label: Optional[str] = None

    @field_validator("source", "target")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        return _require_text(value, "Link endpoint")

    @property
    def identity_key(self) -> LinkKey:
        return (self.source, self.target, self.category)

    def __repr__(self) -> str:
        return f"Link({self.source!r} -> {self.target!r}, category={self.category!r})"


class Category(PropertyBag):
    """A classification tag for nodes and links."""

    id: str
    label: Optional[str] = None
    based_on: Optional[str] = None
    """Parent category this one inherits from."""

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        return _require_text(value, "Category.id")

    @property
    def identity_key(self) -> str:
        return self.id


class Condition(BaseModel):
    """A boolean expression evaluated by the viewer against an element."""

    expression: str

    @classmethod
    def equals(cls, property_name: str, value: PropertyValue) -> "Condition":
        """
        Build a property-equals expression, e.g. ``IsReferenced='False'``.

        Text containing a single quote is wrapped in double quotes instead.

        Raises
        ------
        ValueError
            If the text contains both quote characters
        """
        text = format_value(value)
        if "'" not in text:
            return cls(expression=f"{property_name}='{text}'")
        if '"' in text:
            raise ValueError(f"Cannot quote value containing both quote characters: {text!r}")
        return cls(expression=f'{property_name}="{text}"')


class Setter(BaseModel):
    """A property assignment applied when all style conditions hold."""

    property: str
    value: Optional[PropertyValue] = None
    expression: Optional[str] = None

    @model_validator(mode="after")
    def _validate_payload(self) -> "Setter":
        if self.value is None and self.expression is None:
            raise ValueError("Setter requires either value or expression")
        return self


class Style(BaseModel):
    """
    A conditional visual rule.

    Styles have no identity: two equal styles are both kept.

    Examples
    --------
    >>> Style(
    ...     target_type=ElementKind.NODE,
    ...     group_label="Unreferenced",
    ...     value_label="True",
    ...     conditions=[Condition.equals("IsReferenced", False)],
    ...     setters=[Setter(property="Background", value="#FFFF0000")],
    ... )
    """

    target_type: ElementKind
    group_label: Optional[str] = None
    value_label: Optional[str] = None
    conditions: list[Condition] = Field(default_factory=list)
    setters: list[Setter]

    @model_validator(mode="after")
    def _validate_setters(self) -> "Style":
        if not self.setters:
            raise ValueError("Style requires at least one setter")
        return self


class PropertyDeclaration(BaseModel):
    """Registers a custom property name and its data type for viewers."""

    id: str
    data_type: str = "System.String"
    label: Optional[str] = None
    description: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        return _require_text(value, "PropertyDeclaration.id")

    @classmethod
    def for_value(
        cls,
        property_id: str,
        sample: PropertyValue,
        label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "PropertyDeclaration":
        """Declare a property using the data type of a sample value."""
        return cls(
            id=property_id,
            data_type=data_type_for(sample),
            label=label,
            description=description,
        )

    @property
    def identity_key(self) -> str:
        return self.id


Fragment = Union[Node, Link, Category, Style]
"""Anything a single rule invocation may produce."""
