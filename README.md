# distillery

A library that does four things:

- It chooses the right downloadable binary from a set of release assets.
- It pairs that binary with its checksum file, signature and key.
- It keeps track of which versions of each binary are installed.
- It handles shutdown signals.

It has no runtime dependencies beyond the standard library.

## Installation

```
pip install distillery
```

For development, install the test extra:

```
pip install "distillery[test]"
```

## Platform description

`distillery.osconfig.new(os_name, arch)` builds an `OSConfig` for a target
platform.

- It knows the usual aliases for each operating system, such as `win` for
  Windows, and `osx` and `macos` for Darwin.
- It knows the many spellings of the `amd64` and `arm64` architectures, such
  as `x86_64`, `x64` and `aarch64`.
- On Darwin it also accepts `universal`.
- It knows the platform's extensions: `.exe` on Windows and `.AppImage` on
  Linux.

```python
from distillery import osconfig

target = osconfig.new("linux", "amd64")
target.os_names()               # ['linux']
target.invalid_os()             # ['windows', 'darwin']
target.invalid_architectures()  # the arm64 spellings
```

An operating system or architecture the module does not know has no aliases.
It also has no invalid names.

## Scoring file names

`distillery.score.score(names, opts)` rates file names against a
`ScoreOptions`, which describes what is wanted:

- operating systems, architectures and extensions;
- search terms and versions;
- weighted terms;
- operating systems, architectures and extensions that count against a name.

The result is a list of `Sorted(key, value)` entries, best first. Entries with
equal scores are ordered by name. A name that appears in `opts.names` wins
outright and is returned alone with a score of 200.

```python
from distillery.score import ScoreOptions, score

ranked = score(
    ["dist-linux-amd64", "dist-darwin-amd64"],
    ScoreOptions(os=["linux"], arch=["amd64"], terms=["dist"], invalid_os=["darwin"]),
)
best = ranked[0].key  # 'dist-linux-amd64'
```

`sort_by_value(scores)` gives the same ordering for any mapping of names to
scores.

## Discovering release assets

`distillery.provider.Asset` is one file of a release. It is classified by its
name into an `AssetType`:

- binary
- archive
- installer
- checksum
- signature
- key
- SBOM
- unknown

`distillery.provider.Provider` holds the assets of one release for one
platform. `Provider.discover(names, version)` does the following:

1. It pairs signatures with keys. A signature and a key with the same base name
   are paired first. A key left over is then paired with every signature that
   has no key yet. A `.asc` signature that still has no key gets a `GPGAsset`,
   which stands for the public key it needs, and that asset is added to the
   release.
2. It picks the binary, archive or unknown file that best matches the platform,
   the names and the version.
3. It picks the checksum file, if one scores high enough.
4. It decides whether the signatures cover the binary (`"file"`), the checksum
   file (`"checksum"`) or nothing (`"none"`).
5. It picks the matching signature and its key.

```python
from distillery.provider import Asset, Provider

files = [
    "tool-v1.2.3-linux-amd64.tar.gz",
    "tool-v1.2.3-darwin-arm64.tar.gz",
    "checksums.txt",
]
provider = Provider(os_name="linux", arch="amd64", assets=[Asset(name=f) for f in files])
provider.discover(["tool"], "1.2.3")
provider.binary.name    # 'tool-v1.2.3-linux-amd64.tar.gz'
provider.checksum.name  # 'checksums.txt'
```

If no candidate scores at least 40, `discover` raises `DiscoveryError`.
Setting `"no-score-check": True` in `settings` turns that check off.

## Inventory of installed binaries

`distillery.inventory.new(base_path, opt_path)` walks a directory of symlinks,
such as `~/.distillery/bin`, and builds an `Inventory`. Each link must point
into `opt_path`, below `source/owner/repo/...`.

- A link named `name@version` is recorded as an installed `Version`.
- A plain `name` link marks the version it points to as the latest.

```python
from distillery import inventory

inv = inventory.new("/home/me/.distillery/bin", "/home/me/.distillery/opt")
for key in inv.sorted_keys():  # e.g. 'github/owner/tool'
    latest = inv.get_latest_version(key)
```

Lookups:

- `count()` gives the number of distinct binaries.
- `full_count()` gives the number of installed versions.
- `get_bin_versions(key)` returns the `Bin` stored under a key.
- `get_bin_version(key, version)` returns one version. The version
  `"latest"` selects the version marked as latest.

You can also fill an `Inventory(opt_path=...)` by hand with `add_version`.
`add_version(path, target)` raises `ValueError` when `target` does not lie
below `opt_path`.

## Shutdown signals

`distillery.signals.setup_signal_context()` installs handlers for SIGINT, and
for SIGTERM where the platform has it. It returns a `threading.Event`:

- The first signal sets the event.
- A second signal ends the process with status 1.

`setup_signal_handler()` does the same. Only one of the two may be called,
and only once. A second call raises `RuntimeError`.

`request_shutdown()` acts as if a signal had arrived. It returns `False` when
no handler has been set up.

## What this package does not do

The package only decides which assets belong together. It does not:

- query release hosts;
- download assets;
- verify checksums or signatures;
- extract archives;
- install binaries.

`Source` is only a protocol describing where releases come from; no
implementations are included. There is no command-line program.