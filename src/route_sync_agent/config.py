"""YAML configuration loader for the route sync agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from kube_routes.emitter import ON_FULL_BLOCK, ON_FULL_DROP


@dataclass
class KubeConfig:
    namespace: str
    config_path: Optional[Path] = None


@dataclass
class TransportConfig:
    endpoint: str = "tcp://*:4222"


@dataclass
class EmitterConfig:
    buffer_size: int = 1024
    on_full: str = ON_FULL_BLOCK
    put_timeout: Optional[float] = None


@dataclass
class ResyncConfig:
    interval: float = 10.0


@dataclass
class InformerConfig:
    queue_size: int = 128
    watch_timeout: int = 60


@dataclass
class AgentConfig:
    kube: KubeConfig
    transport: TransportConfig = field(default_factory=TransportConfig)
    emitter: EmitterConfig = field(default_factory=EmitterConfig)
    resync: ResyncConfig = field(default_factory=ResyncConfig)
    informers: InformerConfig = field(default_factory=InformerConfig)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def _parse_kube(section: dict) -> KubeConfig:
    namespace = section.get("namespace")
    if not namespace:
        raise ValueError("Configuration missing 'kube.namespace'")
    config_path = section.get("config_path")
    return KubeConfig(
        namespace=str(namespace),
        config_path=Path(config_path).expanduser() if config_path else None,
    )


def _parse_emitter(section: dict) -> EmitterConfig:
    on_full = str(section.get("on_full", ON_FULL_BLOCK)).lower()
    if on_full not in (ON_FULL_BLOCK, ON_FULL_DROP):
        raise ValueError(f"Unsupported emitter on_full policy '{on_full}'")
    buffer_size = int(section.get("buffer_size", 1024))
    if buffer_size <= 0:
        raise ValueError("emitter 'buffer_size' must be positive")
    put_timeout = section.get("put_timeout")
    return EmitterConfig(
        buffer_size=buffer_size,
        on_full=on_full,
        put_timeout=float(put_timeout) if put_timeout is not None else None,
    )


def _parse_resync(section: dict) -> ResyncConfig:
    interval = float(section.get("interval", 10.0))
    if interval <= 0:
        raise ValueError("resync 'interval' must be positive")
    return ResyncConfig(interval=interval)


def _parse_informers(section: dict) -> InformerConfig:
    return InformerConfig(
        queue_size=int(section.get("queue_size", 128)),
        watch_timeout=int(section.get("watch_timeout", 60)),
    )


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    if data.get("kube") is None:
        raise ValueError("Configuration missing 'kube' section")

    transport = _section(data, "transport")
    return AgentConfig(
        kube=_parse_kube(_section(data, "kube")),
        transport=TransportConfig(
            endpoint=str(transport.get("endpoint", TransportConfig.endpoint))
        ),
        emitter=_parse_emitter(_section(data, "emitter")),
        resync=_parse_resync(_section(data, "resync")),
        informers=_parse_informers(_section(data, "informers")),
    )
