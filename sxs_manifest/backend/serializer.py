"""Serialise an ``AssemblyManifest`` to SxS manifest XML.

Document layout
---------------
Sections are always written in this order, each only when it carries
something::

    <?xml version='1.0' encoding='UTF-8' standalone='yes'?>
    <assembly xmlns="urn:schemas-microsoft-com:asm.v1" manifestVersion="1.0">
      <assemblyIdentity type="win32" name="..." .../>
      <compatibility xmlns="urn:schemas-microsoft-com:compatibility.v1">
        <application>
          <maxversiontested Id="10.0.18362.0"/>
          <supportedOS Id="{8e0f7a12-bfb3-4fe8-b9a5-48fd50a15a9a}"/>
        </application>
      </compatibility>
      <dependency>
        <dependentAssembly>
          <assemblyIdentity .../>
        </dependentAssembly>
      </dependency>
      <trustInfo xmlns="urn:schemas-microsoft-com:asm.v3">
        <security>
          <requestedPrivileges>
            <requestedExecutionLevel level="asInvoker" uiAccess="false"/>
          </requestedPrivileges>
        </security>
      </trustInfo>
      <application xmlns="urn:schemas-microsoft-com:asm.v3">
        <windowsSettings>
          <dpiAware xmlns="http://schemas.microsoft.com/SMI/2005/WindowsSettings">true/pm</dpiAware>
          ...
        </windowsSettings>
      </application>
    </assembly>

Nested sections switch the default namespace rather than using prefixes,
matching the samples in the Windows SDK documentation.  Attribute values
are escaped by lxml; apostrophes, which lxml leaves literal inside
double-quoted attributes, are written as ``&apos;``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO

from lxml import etree

from sxs_manifest.models.common import AssemblyIdentity
from sxs_manifest.models.manifest import (
    ApplicationSettings,
    AssemblyManifest,
    Compatibility,
    Dependency,
    TrustInfo,
)
from sxs_manifest.models.versions import format_guid

log = logging.getLogger(__name__)

NS_ASM_V1 = "urn:schemas-microsoft-com:asm.v1"
NS_ASM_V3 = "urn:schemas-microsoft-com:asm.v3"
NS_COMPAT_V1 = "urn:schemas-microsoft-com:compatibility.v1"
NS_WINDOWS_SETTINGS_2005 = "http://schemas.microsoft.com/SMI/2005/WindowsSettings"
NS_WINDOWS_SETTINGS_2016 = "http://schemas.microsoft.com/SMI/2016/WindowsSettings"
NS_WINDOWS_SETTINGS_2017 = "http://schemas.microsoft.com/SMI/2017/WindowsSettings"
NS_WINDOWS_SETTINGS_2019 = "http://schemas.microsoft.com/SMI/2019/WindowsSettings"
NS_WINDOWS_SETTINGS_2020 = "http://schemas.microsoft.com/SMI/2020/WindowsSettings"


class SerializeError(Exception):
    """Raised when a manifest cannot be written."""


class SinkFailure(SerializeError):
    """Raised when the output sink rejects a write."""


@dataclass(frozen=True, slots=True)
class SerializeConfig:
    """Output formatting options."""

    pretty_print: bool = True
    indent: str = "  "


_DEFAULT_CONFIG = SerializeConfig()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def serialize(
    manifest: AssemblyManifest,
    sink: BinaryIO,
    config: SerializeConfig | None = None,
) -> BinaryIO:
    """Write *manifest* to the binary file-like *sink* and return it.

    Raises ``SinkFailure`` if the sink fails; the document may then be
    partially written.  Free text that XML cannot carry at all (control
    characters, NUL) raises ``SerializeError`` before anything is written.
    """
    config = config or _DEFAULT_CONFIG
    try:
        document = etree.tostring(
            build_tree(manifest, config),
            encoding="UTF-8",
            xml_declaration=True,
            standalone=True,
        )
    except ValueError as exc:
        raise SerializeError(f"Manifest contains text XML cannot represent: {exc}") from exc
    try:
        sink.write(_escape_apostrophes(document))
    except (OSError, ValueError, TypeError) as exc:
        raise SinkFailure(f"Could not write manifest: {exc}") from exc
    return sink


def serialize_to_string(
    manifest: AssemblyManifest,
    config: SerializeConfig | None = None,
) -> str:
    """Return *manifest* as an XML string."""
    buf = serialize(manifest, io.BytesIO(), config)
    return buf.getvalue().decode("utf-8")


def build_tree(
    manifest: AssemblyManifest,
    config: SerializeConfig | None = None,
) -> etree._Element:
    """Return the ``<assembly>`` root element for *manifest*."""
    config = config or _DEFAULT_CONFIG
    root = etree.Element(
        _qname(NS_ASM_V1, "assembly"),
        nsmap={None: NS_ASM_V1},
    )
    root.set("manifestVersion", manifest.manifest_version.value)

    if not manifest.identity.is_default():
        _append_identity(root, manifest.identity)
    if not manifest.compatibility.is_default():
        _append_compatibility(root, manifest.compatibility)
    if manifest.dependency.dependent_assemblies:
        _append_dependency(root, manifest.dependency)
    if manifest.trust_info is not None and not manifest.trust_info.is_default():
        _append_trust_info(root, manifest.trust_info)
    settings = manifest.application_settings
    if settings is not None and not settings.is_default():
        _append_application_settings(root, settings)

    if config.pretty_print:
        etree.indent(root, space=config.indent)

    log.debug(
        "Serialised manifest: %d supported OS, %d dependencies",
        len(manifest.compatibility.supported_os),
        len(manifest.dependency.dependent_assemblies),
    )
    return root


# ---------------------------------------------------------------------------
# Section builders
# ---------------------------------------------------------------------------

def _qname(namespace: str, tag: str) -> str:
    return f"{{{namespace}}}{tag}"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _escape_apostrophes(document: bytes) -> bytes:
    # The declaration is the only markup that uses single quotes.
    declaration, end, body = document.partition(b"?>")
    return declaration + end + body.replace(b"'", b"&apos;")


def _append_identity(parent: etree._Element, identity: AssemblyIdentity) -> None:
    el = etree.SubElement(parent, _qname(NS_ASM_V1, "assemblyIdentity"))
    el.set("type", identity.type.value)
    el.set("name", identity.name)
    if identity.language is not None:
        el.set("language", identity.language)
    if identity.processor_architecture is not None:
        el.set("processorArchitecture", identity.processor_architecture.value)
    if identity.version is not None:
        el.set("version", str(identity.version))
    if identity.public_key_token is not None:
        el.set("publicKeyToken", str(identity.public_key_token))


def _append_compatibility(parent: etree._Element, compat: Compatibility) -> None:
    section = etree.SubElement(
        parent,
        _qname(NS_COMPAT_V1, "compatibility"),
        nsmap={None: NS_COMPAT_V1},
    )
    application = etree.SubElement(section, _qname(NS_COMPAT_V1, "application"))
    if compat.max_version_tested is not None:
        etree.SubElement(
            application,
            _qname(NS_COMPAT_V1, "maxversiontested"),
            Id=str(compat.max_version_tested),
        )
    for supported in compat.supported_os:
        etree.SubElement(
            application,
            _qname(NS_COMPAT_V1, "supportedOS"),
            Id=format_guid(supported.guid),
        )


def _append_dependency(parent: etree._Element, dependency: Dependency) -> None:
    # One <dependency> per assembly, as emitted by the MSVC linker.
    for identity in dependency.dependent_assemblies:
        dep = etree.SubElement(parent, _qname(NS_ASM_V1, "dependency"))
        assembly = etree.SubElement(dep, _qname(NS_ASM_V1, "dependentAssembly"))
        _append_identity(assembly, identity)


def _append_trust_info(parent: etree._Element, trust: TrustInfo) -> None:
    section = etree.SubElement(
        parent,
        _qname(NS_ASM_V3, "trustInfo"),
        nsmap={None: NS_ASM_V3},
    )
    security = etree.SubElement(section, _qname(NS_ASM_V3, "security"))
    privileges = etree.SubElement(security, _qname(NS_ASM_V3, "requestedPrivileges"))
    level = etree.SubElement(privileges, _qname(NS_ASM_V3, "requestedExecutionLevel"))
    level.set("level", trust.execution_level.value)
    if trust.ui_access is not None:
        level.set("uiAccess", _bool(trust.ui_access))


def _append_application_settings(
    parent: etree._Element, settings: ApplicationSettings
) -> None:
    section = etree.SubElement(
        parent,
        _qname(NS_ASM_V3, "application"),
        nsmap={None: NS_ASM_V3},
    )
    windows_settings = etree.SubElement(section, _qname(NS_ASM_V3, "windowsSettings"))

    def setting(namespace: str, tag: str, text: str) -> None:
        el = etree.SubElement(
            windows_settings, _qname(namespace, tag), nsmap={None: namespace}
        )
        el.text = text

    if settings.dpi_awareness is not None:
        setting(NS_WINDOWS_SETTINGS_2005, "dpiAware", settings.dpi_awareness.legacy_value)
        setting(NS_WINDOWS_SETTINGS_2016, "dpiAwareness", settings.dpi_awareness.value)
    if settings.long_path_aware is not None:
        setting(NS_WINDOWS_SETTINGS_2016, "longPathAware", _bool(settings.long_path_aware))
    if settings.gdi_scaling is not None:
        setting(NS_WINDOWS_SETTINGS_2017, "gdiScaling", _bool(settings.gdi_scaling))
    if settings.active_code_page is not None:
        setting(NS_WINDOWS_SETTINGS_2019, "activeCodePage", settings.active_code_page.value)
    if settings.heap_type is not None:
        setting(NS_WINDOWS_SETTINGS_2020, "heapType", settings.heap_type.value)
