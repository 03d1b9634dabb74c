"""Identity value types shared by the manifest and its dependency block.

An ``<assemblyIdentity>`` element names an assembly: the application
itself at the top of a manifest, or a side-by-side assembly it depends on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AssemblyType(Enum):
    """Type of assembly. ``win32`` is the only value the schema accepts."""

    WIN32 = "win32"


class ProcessorArchitecture(Enum):
    X86 = "x86"
    AMD64 = "amd64"
    ARM64 = "arm64"
    IA64 = "ia64"
    ANY = "*"


@dataclass(frozen=True, slots=True)
class AssemblyVersion:
    """Four-part ``major.minor.build.revision`` version."""

    major: int
    minor: int
    build: int
    revision: int | None = None

    def __str__(self) -> str:
        revision = self.revision if self.revision is not None else 0
        return f"{self.major}.{self.minor}.{self.build}.{revision}"


@dataclass(frozen=True, slots=True)
class PublicKeyToken:
    """Last 8 bytes of the SHA-1 hash of the signing public key."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 8:
            raise ValueError(f"Public key token must be 8 bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, text: str) -> "PublicKeyToken":
        return cls(bytes.fromhex(text))

    def __str__(self) -> str:
        return self.value.hex().upper()


@dataclass(slots=True)
class AssemblyIdentity:
    """Name, version and platform of one assembly.

    Every field is optional so that an untouched identity can be told apart
    from one the caller filled in: see :meth:`is_default`.
    """

    name: str = ""
    type: AssemblyType = AssemblyType.WIN32
    version: AssemblyVersion | None = None
    processor_architecture: ProcessorArchitecture | None = None
    language: str | None = None      # e.g. "*" or "en-US"
    public_key_token: PublicKeyToken | None = None

    def is_default(self) -> bool:
        return self == AssemblyIdentity()
