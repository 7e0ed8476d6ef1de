"""Config resolution: one typed value per property, with provenance."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Optional, Sequence, Tuple

from mongoconf.core.utils.logger import log_debug, log_error

from .composite import DEFAULT_SOURCE, CompositeConfig, PropertyResolution, freeze_value
from .descriptor import PropertyDescriptor
from .errors import ConfigError, InvalidValueError, MissingRequiredError
from .layers import SourceLayer
from .registry import PropertyRegistry

# (layer id, matched key, raw value)
_Hit = Tuple[str, str, Any]


class ConfigResolver:
    """Resolve a registry against an ordered list of source layers.

    For every property, in declaration order, the candidate fully-qualified
    names are tried from most to least specific. For each name, layers are
    probed in priority order and the first layer that has a value wins, so
    a value under this registry's own prefix beats a value under a parent
    prefix regardless of which layer holds it. Without a hit the declared
    default applies; a required property without one fails the pass, and
    any other property resolves to absent.

    Resolution is fail-fast: the first error aborts the pass and no partial
    config is returned.
    """

    def __init__(self, registry: PropertyRegistry) -> None:
        self.registry = registry

    def resolve(self, layers: Sequence[SourceLayer]) -> CompositeConfig:
        layers = tuple(layers)
        layer_ids = ", ".join(layer.id for layer in layers) or "none"
        log_debug(
            "resolver",
            f"Resolving {self.registry.label}",
            context=f"layers: {layer_ids}",
        )
        try:
            resolutions: Dict[str, PropertyResolution] = {}
            for descriptor in self.registry.descriptors():
                resolutions[descriptor.name] = self._resolve_property(descriptor, layers)

            values = MappingProxyType(
                {name: freeze_value(resolution.value) for name, resolution in resolutions.items()}
            )
            sub_configs: Dict[str, Any] = {}
            for spec in self.registry.sub_configs():
                try:
                    sub_configs[spec.name] = spec.builder(values)
                except InvalidValueError as exc:
                    raise self._attribute(exc, resolutions) from None
        except ConfigError as exc:
            log_error("resolver", str(exc), context=self.registry.label)
            raise

        return CompositeConfig.build(self.registry, resolutions, sub_configs)

    def _resolve_property(
        self, descriptor: PropertyDescriptor, layers: Tuple[SourceLayer, ...]
    ) -> PropertyResolution:
        candidates = self.registry.candidate_names(descriptor.name)
        hit = self._probe(descriptor, candidates, layers)

        if hit is not None:
            layer_id, key, raw = hit
            try:
                value = descriptor.parse(raw)
            except InvalidValueError as exc:
                raise exc.with_source(f"{layer_id}:{key}") from None
            resolution = PropertyResolution(descriptor.name, value, layer_id, key, raw)
        elif descriptor.has_default:
            resolution = PropertyResolution(
                descriptor.name, descriptor.parsed_default(), DEFAULT_SOURCE, raw=descriptor.default
            )
        elif descriptor.required:
            raise MissingRequiredError(descriptor.name, tuple(candidates))
        else:
            resolution = PropertyResolution(descriptor.name, None, None)

        log_debug(
            "resolver",
            f"{descriptor.name} <- {resolution.source or 'absent'}",
            context=resolution.key or "",
        )
        return resolution

    @staticmethod
    def _attribute(
        exc: InvalidValueError, resolutions: Dict[str, PropertyResolution]
    ) -> InvalidValueError:
        """Report a sub-config error against the value its layer supplied."""
        resolution = resolutions.get(exc.name)
        if resolution is None or resolution.is_absent:
            return exc
        return InvalidValueError(exc.name, resolution.raw, exc.reason, source=resolution.origin)

    @staticmethod
    def _probe(
        descriptor: PropertyDescriptor,
        candidates: Sequence[str],
        layers: Tuple[SourceLayer, ...],
    ) -> Optional[_Hit]:
        for key in candidates:
            for layer in layers:
                raw = layer.lookup(key)
                if raw is not None:
                    return layer.id, key, raw
                if descriptor.map_valued:
                    entries = layer.entries_with_prefix(key + ".")
                    if entries:
                        return layer.id, key + ".*", entries
        return None
