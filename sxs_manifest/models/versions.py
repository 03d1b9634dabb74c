"""Well-known Windows version identifiers.

Two kinds of identifier appear in the ``<compatibility>`` block:

* ``<supportedOS Id="{guid}"/>`` names an OS *family* by a fixed GUID.
  See https://learn.microsoft.com/windows/win32/sysinfo/targeting-your-application-at-windows-8-1
* ``<maxversiontested Id="10.0.18362.0"/>`` names a specific *build* by
  its version quad.

Both tables are read-only and built once at import.
"""

from __future__ import annotations

import uuid
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from sxs_manifest.models.common import AssemblyVersion


class SupportedOS(Enum):
    """OS families an application can declare itself compatible with.

    Declaration order is the order entries are written in.
    """

    WINDOWS_10 = "Windows 10"           # also Windows 11, Server 2016+
    WINDOWS_8_1 = "Windows 8.1"         # Server 2012 R2
    WINDOWS_8 = "Windows 8"             # Server 2012
    WINDOWS_7 = "Windows 7"             # Server 2008 R2
    WINDOWS_VISTA = "Windows Vista"     # Server 2008

    @property
    def guid(self) -> uuid.UUID:
        return SUPPORTED_OS_GUIDS[self]


SUPPORTED_OS_GUIDS: Mapping[SupportedOS, uuid.UUID] = MappingProxyType({
    SupportedOS.WINDOWS_10:    uuid.UUID("8e0f7a12-bfb3-4fe8-b9a5-48fd50a15a9a"),
    SupportedOS.WINDOWS_8_1:   uuid.UUID("1f676c76-80e1-4239-95bb-83d0f6d0da78"),
    SupportedOS.WINDOWS_8:     uuid.UUID("4a2f28e3-53b9-4441-ba9c-d69d4a4a6e38"),
    SupportedOS.WINDOWS_7:     uuid.UUID("35138b9a-5d96-4fbd-8e2d-a2440225f93a"),
    SupportedOS.WINDOWS_VISTA: uuid.UUID("e2011457-1546-43c5-a5fe-008deee3d3f0"),
})


def _check_supported_os_table() -> None:
    missing = [m.name for m in SupportedOS if m not in SUPPORTED_OS_GUIDS]
    if missing:
        raise RuntimeError(f"SupportedOS members without a GUID: {', '.join(missing)}")
    if len(set(SUPPORTED_OS_GUIDS.values())) != len(SUPPORTED_OS_GUIDS):
        raise RuntimeError("SupportedOS GUIDs must be distinct")


_check_supported_os_table()


def format_guid(value: uuid.UUID) -> str:
    """Render *value* as ``{xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}``."""
    return "{" + str(value).lower() + "}"


# ---------------------------------------------------------------------------
# Released builds, for Compatibility.max_version_tested
# Reference: https://learn.microsoft.com/windows/release-health/release-information
# ---------------------------------------------------------------------------

WINDOWS_10_1507 = AssemblyVersion(10, 0, 10240, 0)
WINDOWS_10_1511 = AssemblyVersion(10, 0, 10586, 0)
WINDOWS_10_1607 = AssemblyVersion(10, 0, 14393, 0)
WINDOWS_10_1703 = AssemblyVersion(10, 0, 15063, 0)
WINDOWS_10_1709 = AssemblyVersion(10, 0, 16299, 0)
WINDOWS_10_1803 = AssemblyVersion(10, 0, 17134, 0)
WINDOWS_10_1809 = AssemblyVersion(10, 0, 17763, 0)
WINDOWS_10_1903 = AssemblyVersion(10, 0, 18362, 0)
WINDOWS_10_1909 = AssemblyVersion(10, 0, 18363, 0)
WINDOWS_10_2004 = AssemblyVersion(10, 0, 19041, 0)
WINDOWS_10_20H2 = AssemblyVersion(10, 0, 19042, 0)
WINDOWS_10_21H1 = AssemblyVersion(10, 0, 19043, 0)
WINDOWS_10_21H2 = AssemblyVersion(10, 0, 19044, 0)
WINDOWS_10_22H2 = AssemblyVersion(10, 0, 19045, 0)
WINDOWS_11_21H2 = AssemblyVersion(10, 0, 22000, 0)
WINDOWS_11_22H2 = AssemblyVersion(10, 0, 22621, 0)
WINDOWS_11_23H2 = AssemblyVersion(10, 0, 22631, 0)
WINDOWS_11_24H2 = AssemblyVersion(10, 0, 26100, 0)

WINDOWS_VERSIONS: Mapping[str, AssemblyVersion] = MappingProxyType({
    "Windows 10, version 1507": WINDOWS_10_1507,
    "Windows 10, version 1511": WINDOWS_10_1511,
    "Windows 10, version 1607": WINDOWS_10_1607,
    "Windows 10, version 1703": WINDOWS_10_1703,
    "Windows 10, version 1709": WINDOWS_10_1709,
    "Windows 10, version 1803": WINDOWS_10_1803,
    "Windows 10, version 1809": WINDOWS_10_1809,
    "Windows 10, version 1903": WINDOWS_10_1903,
    "Windows 10, version 1909": WINDOWS_10_1909,
    "Windows 10, version 2004": WINDOWS_10_2004,
    "Windows 10, version 20H2": WINDOWS_10_20H2,
    "Windows 10, version 21H1": WINDOWS_10_21H1,
    "Windows 10, version 21H2": WINDOWS_10_21H2,
    "Windows 10, version 22H2": WINDOWS_10_22H2,
    "Windows 11, version 21H2": WINDOWS_11_21H2,
    "Windows 11, version 22H2": WINDOWS_11_22H2,
    "Windows 11, version 23H2": WINDOWS_11_23H2,
    "Windows 11, version 24H2": WINDOWS_11_24H2,
})
