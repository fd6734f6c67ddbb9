import pytest

from cssmerge.exceptions import ManifestError
from cssmerge.manifest import discover_manifests, load_manifest, load_manifests, parse_manifest
from cssmerge.models import RepoSnippet, UrlSnippet

WRAPPED = """
metadata:
  name: Theme
  authorId: "1234"
  version: 2.1
  tags: [dark, compact]
  output: dist/theme.css
  minify: true
snippets:
  - url: https://example.com/base.css
    order: 2
  - repo: owner/theme
    sources:
      - css_path: src/a.css
        order: 1
"""

FLAT = """
- repo: owner/theme
  branch: dev
  css_path: src/legacy.css
  order: 3
- url: https://example.com/extra.css
"""


def test_load_wrapped_manifest(tmp_path):
    path = tmp_path / "css_manifest.yml"
    path.write_text(WRAPPED, encoding="utf-8")

    bundle = load_manifest(path)

    assert bundle.source_path == path
    assert bundle.metadata.name == "Theme"
    assert bundle.metadata.author_id == "1234"
    assert bundle.metadata.version == "2.1"
    assert bundle.metadata.output == "dist/theme.css"
    assert bundle.metadata.minify is True
    assert bundle.metadata.preserve_metadata is None
    assert isinstance(bundle.snippets[0], UrlSnippet)
    assert isinstance(bundle.snippets[1], RepoSnippet)
    assert bundle.snippets[1].branch == "main"


def test_load_flat_list_manifest(tmp_path):
    path = tmp_path / "legacy.yaml"
    path.write_text(FLAT, encoding="utf-8")

    bundle = load_manifest(path)

    assert bundle.metadata.output == "combined.css"
    legacy = bundle.snippets[0]
    assert isinstance(legacy, RepoSnippet)
    assert legacy.branch == "dev"
    assert legacy.sources[0].css_path == "src/legacy.css"
    assert legacy.sources[0].order == 3


@pytest.mark.parametrize(
    "data",
    [
        {"metadata": {"name": "x"}},
        {"snippets": "not-a-list"},
        "just a string",
        None,
    ],
)
def test_structurally_invalid_manifest_is_fatal(data):
    with pytest.raises(ManifestError):
        parse_manifest(data)


def test_unrecognized_snippet_is_fatal():
    with pytest.raises(ManifestError, match="Snippet #1"):
        parse_manifest({"snippets": [{"url": "https://example.com/a.css"}, {"repo": "owner/theme"}]})


def test_invalid_yaml_is_fatal(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("snippets: [unclosed", encoding="utf-8")

    with pytest.raises(ManifestError, match="Could not parse"):
        load_manifest(path)


def test_discover_reads_directories_in_sorted_order(tmp_path):
    (tmp_path / "b.yml").write_text(FLAT, encoding="utf-8")
    (tmp_path / "a.yaml").write_text(FLAT, encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    assert [p.name for p in discover_manifests([tmp_path])] == ["a.yaml", "b.yml"]


def test_discover_defaults_to_css_manifest_in_cwd(tmp_path):
    (tmp_path / "css_manifest.yml").write_text(FLAT, encoding="utf-8")

    assert discover_manifests([], cwd=tmp_path) == [tmp_path / "css_manifest.yml"]


def test_missing_manifest_is_fatal(tmp_path):
    with pytest.raises(ManifestError, match="not found"):
        load_manifests([tmp_path / "nope.yml"])


def test_one_bad_manifest_aborts_loading(tmp_path):
    (tmp_path / "a.yml").write_text(FLAT, encoding="utf-8")
    (tmp_path / "b.yml").write_text("snippets: {}", encoding="utf-8")

    with pytest.raises(ManifestError):
        load_manifests([tmp_path])


@pytest.mark.parametrize("key", ["tags", "output", "minify", "preserve_metadata", "author"])
def test_null_metadata_values_count_as_absent(key):
    bundle = parse_manifest({"metadata": {"name": "x", key: None}, "snippets": []})

    assert bundle.metadata.tags == []
    assert bundle.metadata.output == "combined.css"
    assert bundle.metadata.minify is False
    assert bundle.metadata.preserve_metadata is None


def test_empty_output_falls_back_to_default():
    bundle = parse_manifest({"metadata": {"output": ""}, "snippets": []})

    assert bundle.metadata.output == "combined.css"


def test_keys_without_values_in_yaml(tmp_path):
    path = tmp_path / "css_manifest.yml"
    path.write_text("metadata:\n  name: Theme\n  tags:\n  output:\n  minify:\nsnippets: []\n", encoding="utf-8")

    metadata = load_manifest(path).metadata

    assert metadata.name == "Theme"
    assert metadata.tags == []
    assert metadata.output == "combined.css"
    assert metadata.minify is False
