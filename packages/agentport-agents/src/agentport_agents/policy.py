"""Conversion policy: target fields that have no source equivalent."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agentport_core.errors import ConfigError

from agentport_agents.types import AgentMode, Capability, TargetMetadata

if TYPE_CHECKING:
    from agentport_core.config import PolicyConfig

DEFAULT_TEMPERATURE = 0.3

# Capabilities this corpus never grants, whatever the source declares.
DEFAULT_DISABLED: frozenset[Capability] = frozenset({
    Capability.TODOWRITE,
    Capability.TODOREAD,
    Capability.LIST,
    Capability.PATCH,
})


@dataclass(frozen=True, slots=True)
class ConversionPolicy:
    """Corpus-wide defaults applied to every converted document."""

    mode: AgentMode = AgentMode.SUBAGENT
    temperature: float = DEFAULT_TEMPERATURE
    disabled: frozenset[Capability] = field(default=DEFAULT_DISABLED)

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            msg = f"Policy temperature must be within [0, 1], got {self.temperature}"
            raise ConfigError(msg)

    @classmethod
    def from_config(cls, config: PolicyConfig) -> ConversionPolicy:
        """Build a policy, keeping built-in values for unset overrides.

        Raises:
            ConfigError: If a mode, temperature, or capability name is invalid.
        """
        kwargs: dict[str, object] = {}
        if config.mode is not None:
            try:
                kwargs["mode"] = AgentMode(config.mode)
            except ValueError:
                msg = f"Unknown agent mode in policy: '{config.mode}'"
                raise ConfigError(msg) from None
        if config.temperature is not None:
            if isinstance(config.temperature, bool) or not isinstance(
                config.temperature, (int, float)
            ):
                msg = f"Policy temperature must be a number, got {config.temperature!r}"
                raise ConfigError(msg)
            kwargs["temperature"] = float(config.temperature)
        if config.disabled_capabilities is not None:
            try:
                kwargs["disabled"] = frozenset(
                    Capability(name) for name in config.disabled_capabilities
                )
            except ValueError as exc:
                msg = f"Unknown capability in policy: {exc}"
                raise ConfigError(msg) from exc
        return cls(**kwargs)


def apply_defaults(
    partial: TargetMetadata,
    policy: ConversionPolicy | None = None,
) -> TargetMetadata:
    """Complete a partial target record.

    Sets mode and temperature from *policy*, forces the policy's disabled
    capabilities off, and fills every capability the mapper did not
    derive with ``False``.  The result always carries all capabilities,
    in enumeration order.
    """
    policy = policy or ConversionPolicy()
    capabilities = {
        cap: (
            False
            if cap in policy.disabled
            else bool(partial.capabilities.get(cap, False))
        )
        for cap in Capability
    }
    return TargetMetadata(
        description=partial.description,
        mode=policy.mode,
        temperature=policy.temperature,
        capabilities=capabilities,
    )
