"""Tests for sxs_manifest.models."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from sxs_manifest.models.common import (
    AssemblyIdentity,
    AssemblyVersion,
    ProcessorArchitecture,
    PublicKeyToken,
)
from sxs_manifest.models.manifest import (
    ApplicationSettings,
    AssemblyManifest,
    DpiAwareness,
    ExecutionLevel,
    ManifestVersion,
    SupportedOSSet,
    TrustInfo,
    common_controls_v6,
)
from sxs_manifest.models.versions import SupportedOS


# ---------------------------------------------------------------------------
# AssemblyManifest.default
# ---------------------------------------------------------------------------

def test_default_manifest_is_empty():
    m = AssemblyManifest.default()
    assert m.manifest_version is ManifestVersion.V1_0
    assert m.identity.is_default()
    assert len(m.compatibility.supported_os) == 0
    assert m.compatibility.max_version_tested is None
    assert m.dependency.dependent_assemblies == []
    assert m.trust_info is None
    assert m.application_settings is None


def test_default_manifests_do_not_share_state():
    a = AssemblyManifest.default()
    b = AssemblyManifest.default()
    a.compatibility.supported_os.insert(SupportedOS.WINDOWS_7)
    a.identity.name = "App"
    assert SupportedOS.WINDOWS_7 not in b.compatibility.supported_os
    assert b.identity.name == ""


def test_default_equals_plain_constructor():
    assert AssemblyManifest.default() == AssemblyManifest()


# ---------------------------------------------------------------------------
# SupportedOSSet
# ---------------------------------------------------------------------------

def test_insert_reports_new_membership():
    s = SupportedOSSet()
    assert s.insert(SupportedOS.WINDOWS_10) is True
    assert s.insert(SupportedOS.WINDOWS_10) is False
    assert len(s) == 1


def test_iteration_follows_declaration_order():
    s = SupportedOSSet()
    s.insert(SupportedOS.WINDOWS_VISTA)
    s.insert(SupportedOS.WINDOWS_10)
    s.insert(SupportedOS.WINDOWS_8)
    assert list(s) == [
        SupportedOS.WINDOWS_10,
        SupportedOS.WINDOWS_8,
        SupportedOS.WINDOWS_VISTA,
    ]


def test_sets_with_different_histories_compare_equal():
    a = SupportedOSSet([SupportedOS.WINDOWS_7, SupportedOS.WINDOWS_10])
    b = SupportedOSSet()
    b.insert(SupportedOS.WINDOWS_10)
    b.insert(SupportedOS.WINDOWS_8)
    b.discard(SupportedOS.WINDOWS_8)
    b.add(SupportedOS.WINDOWS_7)
    assert a == b


def test_discard_missing_member_is_noop():
    s = SupportedOSSet()
    s.discard(SupportedOS.WINDOWS_8_1)
    assert len(s) == 0


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

def test_assembly_version_renders_four_parts():
    assert str(AssemblyVersion(10, 0, 18362, 0)) == "10.0.18362.0"


def test_assembly_version_missing_revision_renders_zero():
    assert str(AssemblyVersion(1, 2, 3)) == "1.2.3.0"


def test_public_key_token_renders_upper_hex():
    token = PublicKeyToken.from_hex("6595b64144ccf1df")
    assert str(token) == "6595B64144CCF1DF"


def test_public_key_token_rejects_wrong_length():
    with pytest.raises(ValueError, match="8 bytes"):
        PublicKeyToken(b"\x00\x01")


def test_identity_is_default_tracks_any_field():
    assert AssemblyIdentity().is_default()
    assert not AssemblyIdentity(name="App").is_default()
    assert not AssemblyIdentity(
        processor_architecture=ProcessorArchitecture.AMD64
    ).is_default()


def test_application_settings_is_default():
    assert ApplicationSettings().is_default()
    assert not ApplicationSettings(long_path_aware=False).is_default()


def test_trust_info_defaults_to_as_invoker():
    trust = TrustInfo()
    assert trust.execution_level is ExecutionLevel.AS_INVOKER
    assert trust.ui_access is None


@pytest.mark.parametrize(
    "awareness, legacy",
    [
        (DpiAwareness.UNAWARE, "false"),
        (DpiAwareness.SYSTEM, "true"),
        (DpiAwareness.PER_MONITOR, "true/pm"),
        (DpiAwareness.PER_MONITOR_V2, "true/pm"),
    ],
)
def test_dpi_awareness_legacy_value(awareness, legacy):
    assert awareness.legacy_value == legacy


def test_trust_info_is_default():
    assert TrustInfo().is_default()
    assert not TrustInfo(ui_access=False).is_default()
    assert not TrustInfo(ExecutionLevel.HIGHEST_AVAILABLE).is_default()


def test_common_controls_v6_identity():
    identity = common_controls_v6()
    assert identity.name == "Microsoft.Windows.Common-Controls"
    assert str(identity.version) == "6.0.0.0"
    assert str(identity.public_key_token) == "6595B64144CCF1DF"
    assert identity.processor_architecture is ProcessorArchitecture.ANY
    assert identity.language == "*"
