"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def load_dotenv(path: str | Path) -> None:
    """Copy KEY=VALUE lines into os.environ without overriding what is set."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip())


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class BuilderSettings:
    graph_name: str = "Survey"
    graph_category: int = 5
    graph_status: str = "active"
    graph_note: str = "Survey Test"
    graph_variant: str = "A"
    graph_variant_weighting: str = "100"
    edge_pk_start: int = 2100
    criterion_pk_start: int = 1800
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5001

    @classmethod
    def from_env(cls) -> "BuilderSettings":
        defaults = cls()
        return cls(
            graph_name=os.environ.get("QBUILDER_GRAPH_NAME", defaults.graph_name),
            graph_category=_int_env("QBUILDER_GRAPH_CATEGORY", defaults.graph_category),
            graph_status=os.environ.get("QBUILDER_GRAPH_STATUS", defaults.graph_status),
            graph_note=os.environ.get("QBUILDER_GRAPH_NOTE", defaults.graph_note),
            graph_variant=os.environ.get("QBUILDER_GRAPH_VARIANT", defaults.graph_variant),
            graph_variant_weighting=os.environ.get(
                "QBUILDER_GRAPH_VARIANT_WEIGHTING", defaults.graph_variant_weighting
            ),
            edge_pk_start=_int_env("QBUILDER_EDGE_PK_START", defaults.edge_pk_start),
            criterion_pk_start=_int_env("QBUILDER_CRITERION_PK_START", defaults.criterion_pk_start),
            log_level=os.environ.get("QBUILDER_LOG_LEVEL", defaults.log_level).upper(),
            host=os.environ.get("QBUILDER_HOST", defaults.host),
            port=_int_env("QBUILDER_PORT", defaults.port),
        )
