"""Assembly manifest model: the semantic content of an SxS manifest.

Every section defaults to "absent", so ``AssemblyManifest.default()``
is already a legal manifest and callers only touch the fields they need::

    manifest = AssemblyManifest.default()
    manifest.compatibility.supported_os.insert(SupportedOS.WINDOWS_10)
    manifest.compatibility.max_version_tested = WINDOWS_10_1903
    xml = manifest.serialize_to_string()
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSet
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO

from sxs_manifest.models.common import (
    AssemblyIdentity,
    AssemblyVersion,
    ProcessorArchitecture,
    PublicKeyToken,
)
from sxs_manifest.models.versions import SupportedOS

if TYPE_CHECKING:
    from sxs_manifest.backend.serializer import SerializeConfig


class ManifestVersion(Enum):
    """Only 1.0 is valid."""

    V1_0 = "1.0"


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------

class SupportedOSSet(MutableSet):
    """Set of ``SupportedOS`` members.

    Membership is all that matters; iteration follows the enum's
    declaration order so repeated serialisation is stable.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Iterable[SupportedOS] = ()) -> None:
        self._members: set[SupportedOS] = set(members)

    def insert(self, supported: SupportedOS) -> bool:
        """Add *supported*; return True if it was not already present."""
        if supported in self._members:
            return False
        self._members.add(supported)
        return True

    def add(self, supported: SupportedOS) -> None:
        self._members.add(supported)

    def discard(self, supported: SupportedOS) -> None:
        self._members.discard(supported)

    def __contains__(self, supported: object) -> bool:
        return supported in self._members

    def __iter__(self) -> Iterator[SupportedOS]:
        return (supported for supported in SupportedOS if supported in self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"SupportedOSSet({[supported.name for supported in self]!r})"


@dataclass(slots=True)
class Compatibility:
    supported_os: SupportedOSSet = field(default_factory=SupportedOSSet)
    # Highest Windows build the application was tested against.  Required
    # for XAML Islands; see ``versions.WINDOWS_*`` for released builds.
    max_version_tested: AssemblyVersion | None = None

    def is_default(self) -> bool:
        return not self.supported_os and self.max_version_tested is None


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Dependency:
    """Side-by-side assemblies the application binds to at load time."""

    dependent_assemblies: list[AssemblyIdentity] = field(default_factory=list)


def common_controls_v6() -> AssemblyIdentity:
    """Identity of ComCtl32 v6, the dependency that enables visual styles."""
    return AssemblyIdentity(
        name="Microsoft.Windows.Common-Controls",
        version=AssemblyVersion(6, 0, 0, 0),
        processor_architecture=ProcessorArchitecture.ANY,
        public_key_token=PublicKeyToken.from_hex("6595b64144ccf1df"),
        language="*",
    )


# ---------------------------------------------------------------------------
# Trust info
# ---------------------------------------------------------------------------

class ExecutionLevel(Enum):
    AS_INVOKER = "asInvoker"
    HIGHEST_AVAILABLE = "highestAvailable"
    REQUIRE_ADMINISTRATOR = "requireAdministrator"


@dataclass(slots=True)
class TrustInfo:
    """Privilege level requested from UAC at launch."""

    execution_level: ExecutionLevel = ExecutionLevel.AS_INVOKER
    # None leaves ``uiAccess`` out of the document (the OS treats it as false).
    # Set it, even to False, to declare asInvoker explicitly.
    ui_access: bool | None = None

    def is_default(self) -> bool:
        return self.execution_level is ExecutionLevel.AS_INVOKER and self.ui_access is None


# ---------------------------------------------------------------------------
# Application settings
# ---------------------------------------------------------------------------

class DpiAwareness(Enum):
    """Process DPI awareness.

    Written both as ``dpiAwareness`` (Windows 10 1607+) and as the legacy
    ``dpiAware`` fallback read by older releases.
    """

    UNAWARE = "unaware"
    SYSTEM = "system"
    PER_MONITOR = "permonitor"
    PER_MONITOR_V2 = "permonitorv2"

    @property
    def legacy_value(self) -> str:
        return _LEGACY_DPI_AWARE[self]


_LEGACY_DPI_AWARE: dict[DpiAwareness, str] = {
    DpiAwareness.UNAWARE: "false",
    DpiAwareness.SYSTEM: "true",
    DpiAwareness.PER_MONITOR: "true/pm",
    DpiAwareness.PER_MONITOR_V2: "true/pm",
}


class ActiveCodePage(Enum):
    UTF8 = "UTF-8"
    LEGACY = "Legacy"


class HeapType(Enum):
    SEGMENT_HEAP = "SegmentHeap"


@dataclass(slots=True)
class ApplicationSettings:
    """``<windowsSettings>`` overrides.  ``None`` means "not declared"."""

    dpi_awareness: DpiAwareness | None = None
    long_path_aware: bool | None = None
    gdi_scaling: bool | None = None
    active_code_page: ActiveCodePage | None = None
    heap_type: HeapType | None = None

    def is_default(self) -> bool:
        return self == ApplicationSettings()


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class AssemblyManifest:
    """Root of the model; owns every nested section exclusively."""

    manifest_version: ManifestVersion = ManifestVersion.V1_0
    identity: AssemblyIdentity = field(default_factory=AssemblyIdentity)
    compatibility: Compatibility = field(default_factory=Compatibility)
    dependency: Dependency = field(default_factory=Dependency)
    trust_info: TrustInfo | None = None
    application_settings: ApplicationSettings | None = None

    @classmethod
    def default(cls) -> "AssemblyManifest":
        return cls()

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def serialize(
        self, sink: BinaryIO, config: SerializeConfig | None = None
    ) -> BinaryIO:
        """Write the manifest to *sink* as UTF-8 XML and return *sink*."""
        from sxs_manifest.backend.serializer import serialize

        return serialize(self, sink, config)

    def serialize_to_string(self, config: SerializeConfig | None = None) -> str:
        from sxs_manifest.backend.serializer import serialize_to_string

        return serialize_to_string(self, config)
