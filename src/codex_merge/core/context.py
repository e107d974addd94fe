from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from codex_merge.compare import CorpusComparator
from codex_merge.core.anomalies import AnomalyLog
from codex_merge.i18n import KeyRules
from codex_merge.identity import IdentityGuard
from codex_merge.utils.pathing import resolve_config_path
from codex_merge.variants import VariantSettings


@dataclass
class RunContext:
    """
    Shared run context.
    Owns every piece of mutable state a run accumulates; catalog managers
    receive it explicitly.
    """

    config: Any
    logger: Any

    primary_dir: Optional[Path] = None
    secondary_dir: Optional[Path] = None
    output_dir: Optional[Path] = None

    comparator: CorpusComparator = field(default_factory=CorpusComparator)
    guard: IdentityGuard = field(default_factory=IdentityGuard)
    anomalies: AnomalyLog = field(default_factory=AnomalyLog)

    stats: Dict[str, Any] = field(default_factory=dict)

    debug: bool = False

    @classmethod
    def from_config(
        cls,
        config: Any,
        logger: Any,
        *,
        primary_dir: Optional[Path] = None,
        secondary_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ) -> "RunContext":
        paths = config.paths or {}
        anomalies = AnomalyLog()
        return cls(
            config=config,
            logger=logger,
            primary_dir=Path(primary_dir)
            if primary_dir
            else resolve_config_path(paths.get("primary_dir"), "input/en"),
            secondary_dir=Path(secondary_dir)
            if secondary_dir
            else resolve_config_path(paths.get("secondary_dir"), "input/zh"),
            output_dir=Path(output_dir)
            if output_dir
            else resolve_config_path(paths.get("output_dir"), "output"),
            comparator=CorpusComparator(
                primary_label=config.primary_lang,
                secondary_label=config.secondary_lang,
                anomalies=anomalies,
            ),
            anomalies=anomalies,
            debug=bool(getattr(config, "debug", False)),
        )

    # ------------------------------------------------------------------
    # Settings derived from config
    # ------------------------------------------------------------------
    @property
    def primary_lang(self) -> str:
        return self.config.primary_lang

    @property
    def secondary_lang(self) -> str:
        return self.config.secondary_lang

    @property
    def empty_value(self) -> Any:
        return self.config.empty_localized_value

    @property
    def key_rules(self) -> KeyRules:
        return KeyRules.from_config(self.config.i18n)

    @property
    def variant_settings(self) -> VariantSettings:
        return VariantSettings.from_config(self.config.variants)
