"""
Tool Catalog — Registry of tool definitions by name.

Each tool pairs an input model with a calculator. Calculators are either
plain functions (input model) → dict or coroutine functions with the same
signature; the router awaits whichever it gets.

Every tool also answers to its legacy name (LEGACY_TOOL_PREFIX + name).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

from pydantic import BaseModel

from domains.finance.config import LEGACY_TOOL_PREFIX

logger = logging.getLogger(__name__)

# Calculator function signature: (validated input) → dict, sync or async
CalculatorFunction = Callable[[Any], dict[str, Any] | Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: type[BaseModel]
    calculator: CalculatorFunction
    aliases: tuple[str, ...] = field(default=())

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool arguments."""
        return self.input_model.model_json_schema()

    def required_fields(self) -> list[str]:
        return [name for name, info in self.input_model.model_fields.items() if info.is_required()]

    def all_names(self) -> tuple[str, ...]:
        return (self.name, LEGACY_TOOL_PREFIX + self.name, *self.aliases)


class ToolCatalog:
    """
    Registry of tool definitions.

    Built once at startup; the router only reads from it afterwards.
    """

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}
        self._names: dict[str, str] = {}

    def register(self, definition: ToolDefinition) -> None:
        """Register a tool under its name and aliases."""
        for name in definition.all_names():
            owner = self._names.get(name)
            if owner is not None and owner != definition.name:
                raise ValueError(f"Tool name '{name}' is already registered by '{owner}'")
        self._tools[definition.name] = definition
        for name in definition.all_names():
            self._names[name] = definition.name
        logger.debug("Registered tool: %s", definition.name)

    def resolve(self, name: str) -> ToolDefinition | None:
        """Find the tool for a name or alias."""
        canonical = self._names.get(name)
        return self._tools.get(canonical) if canonical else None

    def list_names(self) -> list[str]:
        """Canonical tool names in registration order."""
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def subset(self, names: Iterable[str]) -> "ToolCatalog":
        """New catalog holding only the named tools (names or aliases)."""
        selected = ToolCatalog()
        for name in names:
            definition = self.resolve(name)
            if definition is None:
                raise ValueError(f"Cannot enable unknown tool '{name}'")
            if definition.name not in selected._tools:
                selected.register(definition)
        return selected

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._names
