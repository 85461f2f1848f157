"""
Build settings.

Defaults follow the usual static-site layout (`content/` with an
`authors/` section). Every setting can be overridden from the environment:

    export SITECORPUS_CONTENT_DIR=site/content
    export SITECORPUS_INCLUDE_FUTURE=true
    export SITECORPUS_SERIES_TYPES=series,tutorial,course
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

ENV_PREFIX = "SITECORPUS_"


def _env_list(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class BuildConfig:
    content_dir: Path = Path("content")
    extensions: Tuple[str, ...] = (".md", ".markdown")
    author_sections: Tuple[str, ...] = ("authors",)
    author_types: Tuple[str, ...] = ("author",)
    series_types: Tuple[str, ...] = ("series", "tutorial")
    include_future: bool = False
    max_workers: int = 1

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "BuildConfig":
        """Defaults, then SITECORPUS_* variables, then explicit overrides."""
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        if get("CONTENT_DIR"):
            config = replace(config, content_dir=Path(get("CONTENT_DIR")))
        if get("EXTENSIONS"):
            config = replace(config, extensions=_env_list(get("EXTENSIONS")))
        if get("AUTHOR_SECTIONS"):
            config = replace(config, author_sections=_env_list(get("AUTHOR_SECTIONS")))
        if get("AUTHOR_TYPES"):
            config = replace(config, author_types=_env_list(get("AUTHOR_TYPES")))
        if get("SERIES_TYPES"):
            config = replace(config, series_types=_env_list(get("SERIES_TYPES")))
        if get("INCLUDE_FUTURE") is not None:
            config = replace(config, include_future=_env_bool(get("INCLUDE_FUTURE")))
        if get("MAX_WORKERS"):
            config = replace(config, max_workers=max(1, int(get("MAX_WORKERS"))))

        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides) if overrides else config
