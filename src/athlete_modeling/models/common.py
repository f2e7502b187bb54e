"""Shared pydantic helpers for input records."""

from pydantic import AliasChoices, ConfigDict


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def aliases(name: str, *extra: str) -> AliasChoices:
    """Accept the field name, its camelCase form and any legacy keys."""
    return AliasChoices(name, to_camel(name), *extra)


INPUT_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)
