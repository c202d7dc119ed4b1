import os

import pytest

from distillery import osconfig
from distillery.provider import (
    Asset,
    AssetType,
    DiscoveryError,
    GPGAsset,
    Provider,
)

PULUMI = [
    "B3SUMS",
    "B3SUMS.sig",
    "pulumi-3.133.0-checksums.txt",
    "pulumi-3.133.0-checksums.txt.sig",
    "pulumi-v3.133.0-darwin-arm64.tar.gz",
    "pulumi-v3.133.0-darwin-arm64.tar.gz.sig",
    "pulumi-v3.133.0-darwin-x64.tar.gz",
    "pulumi-v3.133.0-darwin-x64.tar.gz.sig",
    "pulumi-v3.133.0-linux-arm64.tar.gz",
    "pulumi-v3.133.0-linux-arm64.tar.gz.sig",
    "pulumi-v3.133.0-linux-x64.tar.gz",
    "pulumi-v3.133.0-linux-x64.tar.gz.sig",
    "pulumi-v3.133.0-windows-arm64.zip",
    "pulumi-v3.133.0-windows-arm64.zip.sig",
    "pulumi-v3.133.0-windows-x64.zip",
    "pulumi-v3.133.0-windows-x64.zip.sig",
    "sdk-nodejs-pulumi-pulumi-3.133.0.tgz",
    "sdk-nodejs-pulumi-pulumi-3.133.0.tgz.sig",
    "sdk-python-pulumi-3.133.0-py3-none-any.whl",
    "sdk-python-pulumi-3.133.0-py3-none-any.whl.sig",
    "SHA512SUMS",
    "SHA512SUMS.sig",
]


def _cosign_files():
    files = []
    for arch in ("aarch64", "armv7hl", "ppc64le", "riscv64", "s390x", "x86_64"):
        base = f"cosign-2.4.0-1.{arch}.rpm"
        files += [base, f"{base}-keyless.pem", f"{base}-keyless.sig"]
    for target, sbom in (
        ("darwin-amd64", "darwin_amd64"),
        ("darwin-arm64", "darwin_arm64"),
        ("linux-amd64", "linux_amd64"),
        ("linux-arm", None),
        ("linux-arm64", "linux_arm64"),
        ("linux-pivkey-pkcs11key-amd64", "linux_amd64"),
        ("linux-pivkey-pkcs11key-arm64", "linux_arm64"),
        ("linux-ppc64le", "linux_ppc64le"),
        ("linux-riscv64", "linux_riscv64"),
        ("linux-s390x", "linux_s390x"),
        ("windows-amd64.exe", "windows_amd64"),
    ):
        base = f"cosign-{target}"
        files += [base, f"{base}-keyless.pem", f"{base}-keyless.sig", f"{base}.sig"]
        if sbom:
            files.append(f"{base}_2.4.0_{sbom}.sbom.json")
    files.append("cosign-linux-arm_2.4.0_linux_arm.sbom.json")
    for pkg in (
        "aarch64.apk", "amd64.deb", "arm64.deb", "armhf.deb", "armv7.apk",
        "ppc64el.deb", "ppc64le.apk", "riscv64.apk", "riscv64.deb", "s390x.apk",
        "s390x.deb", "x86_64.apk",
    ):
        base = f"cosign_2.4.0_{pkg}"
        files += [base, f"{base}-keyless.pem", f"{base}-keyless.sig"]
    files += [
        "cosign_checksums.txt",
        "cosign_checksums.txt-keyless.pem",
        "cosign_checksums.txt-keyless.sig",
        "release-cosign.pub",
    ]
    return files


COSIGN = _cosign_files()

ACORN = [
    "acorn-v0.10.1-linux-amd64.tar.gz",
    "acorn-v0.10.1-linux-arm64.tar.gz",
    "acorn-v0.10.1-macOS-universal.tar.gz",
    "acorn-v0.10.1-macOS-universal.zip",
    "acorn-v0.10.1-windows-amd64.zip",
]

NERDCTL = [
    "nerdctl-1.7.7-freebsd-amd64.tar.gz",
    "nerdctl-1.7.7-go-mod-vendor.tar.gz",
    "nerdctl-1.7.7-linux-amd64.tar.gz",
    "nerdctl-1.7.7-linux-amd-v7.tar.gz",
    "nerdctl-1.7.7-linux-arm64.tar.gz",
    "nerdctl-1.7.7-linux-ppc64le.tar.gz",
    "nerdctl-1.7.7-linux-riscv64.tar.gz",
    "nerdctl-1.7.7-linux-s390x.tar.gz",
    "nerdctl-1.7.7-windows-amd64.tar.gz",
    "nerdctl-full-1.7.7-linux-amd64.tar.gz",
    "nerdctl-full-1.7.7-linux-arm64.tar.gz",
    "SHA256SUMS",
    "SHA256SUMS.asc",
]


def _distillery_files():
    files = ["checksums.txt", "checksums.txt.pem", "checksums.txt.sig"]
    for target, ext in (
        ("darwin-amd64", "tar.gz"),
        ("darwin-arm64", "tar.gz"),
        ("freebsd-amd64", "tar.gz"),
        ("freebsd-arm64", "tar.gz"),
        ("linux-amd64", "tar.gz"),
        ("linux-arm64", "tar.gz"),
        ("windows-amd64", "zip"),
        ("windows-arm64", "zip"),
    ):
        base = f"distillery-v1.0.0-beta.5-{target}.{ext}"
        files += [base, f"{base}.sbom.json", f"{base}.sbom.json.pem", f"{base}.sbom.json.sig"]
    return files


DISTILLERY = _distillery_files()

GITLAB_RUNNER = [
    "release.sha256.asc",
    "release.sha256",
    "gitlab-runner-linux-amd64",
    "gitlab-runner-linux-arm64",
    "gitlab-runner-darwin-arm64",
    "gitlab-runner-darwin-amd64",
]


def _provider(filenames, os_name, arch, version, no_score_check=False):
    assets = [
        Asset(name=name, display_name=name, os=os_name, arch=arch, version=version)
        for name in filenames
    ]
    return Provider(
        os_name=os_name,
        arch=arch,
        os_config=osconfig.new(os_name, arch),
        settings={"no-score-check": no_score_check},
        assets=assets,
    )


CASES = [
    ("pulumi", "3.133.0", PULUMI, "darwin", "amd64",
     {"binary": "pulumi-v3.133.0-darwin-x64.tar.gz",
      "signature": "pulumi-v3.133.0-darwin-x64.tar.gz.sig",
      "checksum": "pulumi-3.133.0-checksums.txt"}),
    ("pulumi", "3.133.0", PULUMI, "darwin", "arm64",
     {"binary": "pulumi-v3.133.0-darwin-arm64.tar.gz",
      "signature": "pulumi-v3.133.0-darwin-arm64.tar.gz.sig",
      "checksum": "pulumi-3.133.0-checksums.txt"}),
    ("pulumi", "3.133.0", PULUMI, "linux", "amd64",
     {"binary": "pulumi-v3.133.0-linux-x64.tar.gz",
      "signature": "pulumi-v3.133.0-linux-x64.tar.gz.sig",
      "checksum": "pulumi-3.133.0-checksums.txt"}),
    ("pulumi", "3.133.0", PULUMI, "linux", "arm64",
     {"binary": "pulumi-v3.133.0-linux-arm64.tar.gz",
      "signature": "pulumi-v3.133.0-linux-arm64.tar.gz.sig",
      "checksum": "pulumi-3.133.0-checksums.txt"}),
    ("pulumi", "3.133.0", PULUMI, "windows", "amd64",
     {"binary": "pulumi-v3.133.0-windows-x64.zip",
      "signature": "pulumi-v3.133.0-windows-x64.zip.sig",
      "checksum": "pulumi-3.133.0-checksums.txt"}),
    ("cosign", "2.4.0", COSIGN, "darwin", "amd64",
     {"binary": "cosign-darwin-amd64", "checksum": "cosign_checksums.txt",
      "signature": "cosign-darwin-amd64.sig", "key": "release-cosign.pub"}),
    ("cosign", "2.4.0", COSIGN, "darwin", "arm64",
     {"binary": "cosign-darwin-arm64", "checksum": "cosign_checksums.txt",
      "signature": "cosign-darwin-arm64.sig", "key": "release-cosign.pub"}),
    ("cosign", "2.4.0", COSIGN, "linux", "amd64",
     {"binary": "cosign-linux-amd64", "checksum": "cosign_checksums.txt",
      "signature": "cosign-linux-amd64.sig", "key": "release-cosign.pub"}),
    ("cosign", "2.4.0", COSIGN, "linux", "arm64",
     {"binary": "cosign-linux-arm64", "checksum": "cosign_checksums.txt",
      "signature": "cosign-linux-arm64.sig", "key": "release-cosign.pub"}),
    ("cosign", "2.4.0", COSIGN, "windows", "amd64",
     {"binary": "cosign-windows-amd64.exe", "checksum": "cosign_checksums.txt",
      "signature": "cosign-windows-amd64.exe.sig", "key": "release-cosign.pub"}),
    ("acorn", "0.10.1", ACORN, "darwin", "amd64",
     {"binary": "acorn-v0.10.1-macOS-universal.tar.gz"}),
    ("acorn", "0.10.1", ACORN, "darwin", "arm64",
     {"binary": "acorn-v0.10.1-macOS-universal.tar.gz"}),
    ("acorn", "0.10.1", ACORN, "linux", "amd64",
     {"binary": "acorn-v0.10.1-linux-amd64.tar.gz"}),
    ("acorn", "0.10.1", ACORN, "linux", "arm64",
     {"binary": "acorn-v0.10.1-linux-arm64.tar.gz"}),
    ("acorn", "0.10.1", ACORN, "windows", "amd64",
     {"binary": "acorn-v0.10.1-windows-amd64.zip"}),
    ("nerdctl", "1.7.7", NERDCTL, "linux", "arm64",
     {"binary": "nerdctl-1.7.7-linux-arm64.tar.gz", "signature": "SHA256SUMS.asc",
      "checksum": "SHA256SUMS"}),
    ("distillery", "1.0.0-beta.5", DISTILLERY, "darwin", "amd64",
     {"binary": "distillery-v1.0.0-beta.5-darwin-amd64.tar.gz", "checksum": "checksums.txt",
      "signature": "checksums.txt.sig", "key": "checksums.txt.pem"}),
    ("gitlab-runner", "16.11.4", GITLAB_RUNNER, "darwin", "amd64",
     {"binary": "gitlab-runner-darwin-amd64", "checksum": "release.sha256",
      "signature": "release.sha256.asc", "key": "release.sha256.pub"}),
]


@pytest.mark.parametrize(
    "name,version,filenames,os_name,arch,expected",
    CASES,
    ids=[f"{c[0]}-{c[1]}-{c[3]}-{c[4]}" for c in CASES],
)
def test_discover(name, version, filenames, os_name, arch, expected):
    provider = _provider(filenames, os_name, arch, version)
    provider.discover([name], version)

    assert provider.binary.name == expected["binary"]
    for role in ("checksum", "signature", "key"):
        if role in expected:
            found = getattr(provider, role)
            assert found is not None, f"expected {role} and missing"
            assert found.name == expected[role]


def test_discover_score_too_low():
    provider = _provider(NERDCTL, "darwin", "amd64", "1.7.7")
    with pytest.raises(DiscoveryError, match="^no matching asset found, score too low$"):
        provider.discover(["nerdctl"], "1.7.7")


def test_discover_without_score_check_finds_no_binary():
    provider = _provider(NERDCTL, "darwin", "amd64", "1.7.7", no_score_check=True)
    with pytest.raises(DiscoveryError, match="^no binary found$"):
        provider.discover(["nerdctl"], "1.7.7")


def test_discover_with_no_assets():
    provider = Provider(os_name="linux", arch="amd64")
    with pytest.raises(DiscoveryError, match="score too low"):
        provider.discover(["tool"], "1.0.0")


@pytest.mark.parametrize(
    "filenames,name,version,os_name,arch,expected",
    [
        (PULUMI, "pulumi", "3.133.0", "linux", "amd64", "file"),
        (NERDCTL, "nerdctl", "1.7.7", "linux", "arm64", "checksum"),
        (ACORN, "acorn", "0.10.1", "linux", "amd64", "none"),
        (DISTILLERY, "distillery", "1.0.0-beta.5", "darwin", "amd64", "checksum"),
    ],
)
def test_signature_type(filenames, name, version, os_name, arch, expected):
    provider = _provider(filenames, os_name, arch, version)
    provider.discover([name], version)
    assert provider.signature_type == expected


def test_checksum_type():
    nerdctl = _provider(NERDCTL, "linux", "arm64", "1.7.7")
    nerdctl.discover(["nerdctl"], "1.7.7")
    assert nerdctl.checksum_type == "sha256"

    acorn = _provider(ACORN, "linux", "amd64", "0.10.1")
    acorn.discover(["acorn"], "0.10.1")
    assert acorn.checksum_type == "none"
    assert acorn.checksum is None
    assert acorn.signature is None


def test_gpg_key_is_added_and_linked():
    provider = _provider(GITLAB_RUNNER, "darwin", "amd64", "16.11.4")
    provider.discover(["gitlab-runner"], "16.11.4")

    assert isinstance(provider.key, GPGAsset)
    assert provider.key.asset_type is AssetType.KEY
    assert provider.key.matched_asset is provider.signature
    assert provider.signature.matched_asset is provider.key
    assert len(provider.assets) == len(GITLAB_RUNNER) + 1


def test_shared_key_matches_unmatched_signatures():
    provider = _provider(COSIGN, "linux", "amd64", "2.4.0")
    provider.discover(["cosign"], "2.4.0")

    keyless = next(a for a in provider.assets if a.name == "cosign-linux-amd64-keyless.sig")
    assert keyless.matched_asset.name == "cosign-linux-amd64-keyless.pem"
    shared = next(a for a in provider.assets if a.name == "release-cosign.pub")
    assert shared.matched_asset is None


def test_gpg_asset_id_and_path():
    key = GPGAsset(name="release.sha256.pub", key_id=1234)
    assert key.id() == "key-1234"
    assert key.path() == os.path.join("gpg", "1234")


def test_provider_builds_os_config():
    provider = Provider(os_name="windows", arch="amd64")
    assert provider.os_config.os_names() == ["windows", "win"]
    assert provider.os_config.extensions == [".exe"]