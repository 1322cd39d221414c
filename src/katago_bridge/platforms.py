"""
Per-platform engine builds.

The engine release ships one archive per operating system and compute backend.
``resolve_profile`` picks the row for the running system once at startup; the
resulting ``PlatformProfile`` is handed to the fetcher and the command builder.
"""

import platform
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from katago_bridge.errors import UnsupportedPlatformError


class Variant(str, Enum):
    GPU = "gpu"
    CPU = "cpu"

    @property
    def label(self) -> str:
        return {Variant.GPU: "GPU (OpenCL)", Variant.CPU: "CPU (Eigen)"}[self]

    @property
    def backend(self) -> str:
        return {Variant.GPU: "opencl", Variant.CPU: "eigenavx2"}[self]

    @classmethod
    def parse(cls, value: str) -> "Variant":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"unknown variant {value!r}, expected one of "
                f"{', '.join(v.value for v in cls)}"
            ) from None


@dataclass(frozen=True)
class PlatformProfile:
    system: str
    binary_name: str
    archive_suffix: str
    archives: Dict[Variant, str] = field(default_factory=dict)

    def archive_for(self, variant: Variant) -> str:
        return self.archives[variant]


def _profile(system: str, binary_name: str, suffix: str, version: str) -> PlatformProfile:
    return PlatformProfile(
        system=system,
        binary_name=binary_name,
        archive_suffix=suffix,
        archives={
            variant: f"katago-{version}-{variant.backend}-{suffix}.zip"
            for variant in Variant
        },
    )


def build_profiles(version: str) -> Dict[str, PlatformProfile]:
    return {
        "Linux": _profile("Linux", "katago", "linux-x64", version),
        "Windows": _profile("Windows", "katago.exe", "windows-x64", version),
    }


def resolve_profile(version: str, system: Optional[str] = None) -> PlatformProfile:
    """Look up the engine build for ``system`` (defaults to the running OS)."""
    system = system or platform.system()
    profiles = build_profiles(version)
    try:
        return profiles[system]
    except KeyError:
        raise UnsupportedPlatformError(
            f"No KataGo {version} build for {system}",
            detail=f"supported: {', '.join(sorted(profiles))}",
        ) from None
