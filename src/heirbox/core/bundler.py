"""
Hand-off of build parameters to whatever packages the viewer app.

Bundlers never raise for their own failures: they report errors and warnings
and the builder decides what to do with them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class BundleReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class Bundler:
    def bundle(self, params: Dict[str, Any]) -> BundleReport:
        raise NotImplementedError


class NullBundler(Bundler):
    """Accepts the parameters and does nothing with them."""

    def bundle(self, params: Dict[str, Any]) -> BundleReport:
        return BundleReport()


class ParamsFileBundler(Bundler):
    """Writes the build parameters as JSON for an external app build."""

    def __init__(self, path: str | Path, dist_dir: Optional[str | Path] = None):
        self.path = Path(path)
        self.dist_dir = Path(dist_dir) if dist_dir is not None else None

    def bundle(self, params: Dict[str, Any]) -> BundleReport:
        report = BundleReport()

        if self.dist_dir is not None:
            if self.path.resolve().is_relative_to(self.dist_dir.resolve()):
                report.warnings.append(
                    f"build parameters written inside the dist directory: {self.path}"
                )

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(params, f, indent=2)
        except OSError as exc:
            report.errors.append(f"cannot write build parameters to {self.path}: {exc}")
            return report

        logger.info("Build parameters written to %s", self.path)
        return report
