"""YAML configuration describing where and how to load the route network."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .domain_types import EPSILON

logger = logging.getLogger(__name__)

ROUTE_FORMATS = ("geojson", "csv")


def _infer_format(path: Path) -> str:
    suffixes = [suffix.lower() for suffix in path.suffixes]
    if ".geojson" in suffixes or ".json" in suffixes:
        return "geojson"
    if ".csv" in suffixes:
        return "csv"
    raise ValueError(
        f"Cannot infer route file format from {path.name!r}; set 'routes_format'"
    )


def _positive_float(value: object, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"'{label}' must be numeric, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"'{label}' must be positive")
    return number


@dataclass(frozen=True)
class NetworkConfig:
    """Settings for building a :class:`~netmob.network.routes.RouteCatalog`."""

    routes_path: Path
    routes_format: str = "geojson"
    route_id_field: str = "route_id"
    geometry_field: str = "geometry"
    length_field: Optional[str] = None
    srid: int = 0
    epsilon: float = EPSILON
    locate_tolerance: float = 1.0e-6

    def __post_init__(self) -> None:
        if self.routes_format not in ROUTE_FORMATS:
            raise ValueError(
                f"routes_format must be one of {ROUTE_FORMATS}, got {self.routes_format!r}"
            )
        if self.srid < 0:
            raise ValueError("srid must be non-negative")

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, object], base_dir: Optional[Path] = None
    ) -> "NetworkConfig":
        if not isinstance(data, Mapping):
            raise TypeError("Network configuration must be a mapping")
        raw_path = data.get("routes_path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError("Network configuration requires a non-empty 'routes_path'")
        routes_path = Path(raw_path.strip())
        if base_dir is not None and not routes_path.is_absolute():
            routes_path = base_dir / routes_path

        routes_format = data.get("routes_format")
        if routes_format is None:
            routes_format = _infer_format(routes_path)
        routes_format = str(routes_format).strip().lower()

        length_field = data.get("length_field")
        srid = data.get("srid", 0)
        if not isinstance(srid, int):
            raise TypeError("'srid' must be an integer")

        return cls(
            routes_path=routes_path,
            routes_format=routes_format,
            route_id_field=str(data.get("route_id_field", "route_id")),
            geometry_field=str(data.get("geometry_field", "geometry")),
            length_field=str(length_field) if length_field is not None else None,
            srid=srid,
            epsilon=_positive_float(data.get("epsilon", EPSILON), "epsilon"),
            locate_tolerance=_positive_float(
                data.get("locate_tolerance", 1.0e-6), "locate_tolerance"
            ),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "NetworkConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Network configuration not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Network YAML must contain a mapping at the top level")
        config = cls.from_mapping(data, base_dir=config_path.parent)
        logger.debug("Loaded network configuration from %s", config_path)
        return config

    def to_yaml(self, path: str | Path) -> None:
        output: Dict[str, object] = {
            "routes_path": str(self.routes_path),
            "routes_format": self.routes_format,
            "route_id_field": self.route_id_field,
            "geometry_field": self.geometry_field,
            "srid": int(self.srid),
            "epsilon": float(self.epsilon),
            "locate_tolerance": float(self.locate_tolerance),
        }
        if self.length_field is not None:
            output["length_field"] = self.length_field
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(output, handle, sort_keys=True)


__all__ = ["NetworkConfig", "ROUTE_FORMATS"]
