"""Attribute schema of the resources exposed by the provider."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

PROVIDER_TYPE_NAME = "external"


@dataclass(frozen=True, slots=True)
class Attribute:
    """Declaration of a single resource attribute."""

    name: str
    type: str
    description: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    requires_replace: bool = False
    use_state_for_unknown: bool = False


@dataclass(frozen=True, slots=True)
class ResourceSchema:
    """Named set of attributes plus the resource description."""

    type_name: str
    description: str
    attributes: tuple[Attribute, ...]

    @property
    def replace_attributes(self) -> tuple[str, ...]:
        """Attributes whose change forces a fresh exchange."""

        return tuple(attr.name for attr in self.attributes if attr.requires_replace)

    def attribute(self, name: str) -> Attribute:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        raise KeyError(name)

    def as_dict(self) -> dict[str, Any]:
        return {
            "type_name": self.type_name,
            "description": self.description,
            "attributes": {attr.name: asdict(attr) for attr in self.attributes},
        }


PERSISTED_RESOURCE = ResourceSchema(
    type_name=f"{PROVIDER_TYPE_NAME}_persisted",
    description=(
        "The `external_persisted` resource allows an external program implementing a specific "
        "protocol (defined below) to act as a resource, exposing arbitrary data for use elsewhere "
        "in the configuration. The program runs once on create; its result is kept in state and "
        "reads never run it again.\n"
        "\n"
        "**Warning** This mechanism is provided as an \"escape hatch\" for exceptional situations "
        "where a first-class provider is not more appropriate. Its capabilities are limited in "
        "comparison to a true resource, and implementing a resource via an external program is "
        "likely to hurt the portability of your configuration by creating dependencies on external "
        "programs and libraries that may not be available (or may need to be used differently) on "
        "different operating systems."
    ),
    attributes=(
        Attribute(
            name="id",
            type="string",
            description="Identifier",
            computed=True,
            use_state_for_unknown=True,
        ),
        Attribute(
            name="program",
            type="list(string)",
            description=(
                "A list of strings, whose first element is the program to run and whose "
                "subsequent elements are optional command line arguments to the program. The "
                "provider does not execute the program through a shell, so it is not necessary "
                "to escape shell metacharacters nor add quotes around arguments containing spaces."
            ),
            required=True,
            requires_replace=True,
        ),
        Attribute(
            name="working_dir",
            type="string",
            description=(
                "Working directory of the program. If not supplied, the program will run "
                "in the current directory. A relative path in `program` is resolved against "
                "the provider's current directory, not against `working_dir`."
            ),
            optional=True,
            requires_replace=True,
        ),
        Attribute(
            name="query",
            type="map(string)",
            description=(
                "A map of string values to pass to the external program as the query "
                "arguments. If not supplied, the program will receive an empty object as its input."
            ),
            optional=True,
            requires_replace=True,
        ),
        Attribute(
            name="result",
            type="map(string)",
            description=(
                "A map of string values returned from the external program, decoded from "
                "the JSON object it writes to standard output."
            ),
            computed=True,
        ),
    ),
)

RESOURCES: dict[str, ResourceSchema] = {PERSISTED_RESOURCE.type_name: PERSISTED_RESOURCE}


def provider_metadata() -> dict[str, Any]:
    """Describe the provider and the schema of every resource it serves."""

    return {
        "type_name": PROVIDER_TYPE_NAME,
        "resources": {name: schema.as_dict() for name, schema in RESOURCES.items()},
        "data_sources": {},
    }


__all__ = [
    "Attribute",
    "PERSISTED_RESOURCE",
    "PROVIDER_TYPE_NAME",
    "RESOURCES",
    "ResourceSchema",
    "provider_metadata",
]
