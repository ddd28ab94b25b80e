"""Tests for the HTTP registry source."""

import asyncio
import os
from unittest.mock import AsyncMock, patch

import pytest

from conftest import package_document
from vbablocks.errors import ManifestInvalid, SourceUnavailable
from vbablocks.manifest import RegistryDependency
from vbablocks.sources import RegistrySource
from vbablocks.versioning import Range, Version

INDEX = "https://registry.example.com/index"


def _entry(name, version, yanked=False, dependencies=None):
    return {"version": version, "yanked": yanked, "manifest": package_document(name, version, dependencies)}


def _dependency(name, text="*"):
    return RegistryDependency(name=name, range=Range.parse(text))


class TestRegistrySource:
    """Tests for RegistrySource.lookup()."""

    def test_package_url(self):
        """Package names are quoted into <index>/<name>.json."""
        source = RegistrySource("vba-blocks", INDEX + "/")
        assert source.package_url("dictionary") == f"{INDEX}/dictionary.json"
        assert source.package_url("a/b") == f"{INDEX}/a%2Fb.json"

    def test_lookup_filters_by_range(self, tmp_path):
        """Only published versions within the requested range are returned."""
        document = {"name": "dictionary", "versions": [
            _entry("dictionary", "1.0.0"),
            _entry("dictionary", "1.4.1", dependencies={"json": "^2"}),
            _entry("dictionary", "2.0.0"),
        ]}
        source = RegistrySource("vba-blocks", INDEX, str(tmp_path))
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(200, {}, document))) as mock:
            candidates = asyncio.run(source.lookup(_dependency("dictionary", "^1")))

        mock.assert_awaited_once()
        assert mock.await_args.args[0] == f"{INDEX}/dictionary.json"
        assert [c.version for c in candidates] == [Version("1.0.0"), Version("1.4.1")]
        latest = candidates[1]
        assert latest.manifest.dependencies[0].name == "json"
        assert latest.manifest.dir == os.path.join(str(tmp_path), "registry", "vba-blocks", "dictionary-1.4.1")
        assert latest.source.range == Range.parse("^1")

    def test_skips_yanked_invalid_and_mismatched(self):
        """Yanked, unparseable and mislabelled versions are ignored."""
        document = {"versions": [
            _entry("dictionary", "1.0.0", yanked=True),
            {"version": "not-a-version", "manifest": {}},
            _entry("other", "1.1.0"),
            _entry("dictionary", "1.2.0"),
        ]}
        source = RegistrySource()
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(200, {}, document))):
            candidates = asyncio.run(source.lookup(_dependency("dictionary")))

        assert [str(c.version) for c in candidates] == ["1.2.0"]

    def test_document_is_fetched_once(self):
        """Lookups with different ranges share one fetch per package."""
        document = {"versions": [_entry("dictionary", "1.0.0"), _entry("dictionary", "2.0.0")]}
        source = RegistrySource()

        async def run():
            return await asyncio.gather(
                source.lookup(_dependency("dictionary", "^1")),
                source.lookup(_dependency("dictionary", "^2")),
            )

        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(200, {}, document))) as mock:
            first, second = asyncio.run(run())

        assert mock.await_count == 1
        assert [str(c.version) for c in first] == ["1.0.0"]
        assert [str(c.version) for c in second] == ["2.0.0"]

    def test_not_found(self):
        """A 404 means the package has no candidates."""
        source = RegistrySource()
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(404, {}, None))):
            assert asyncio.run(source.lookup(_dependency("missing"))) == []

    @pytest.mark.parametrize("status", [0, 500, 503, 403])
    def test_unavailable(self, status):
        """Transport failures, server errors and unexpected statuses raise SourceUnavailable."""
        source = RegistrySource("internal", INDEX)
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(status, {}, None))):
            with pytest.raises(SourceUnavailable) as excinfo:
                asyncio.run(source.lookup(_dependency("dictionary")))
        assert excinfo.value.source == "internal"

    def test_invalid_body(self):
        """A 200 without a JSON object is unusable."""
        source = RegistrySource()
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(200, {}, None))):
            with pytest.raises(SourceUnavailable):
                asyncio.run(source.lookup(_dependency("dictionary")))

    def test_invalid_manifest(self):
        """A published manifest missing required fields is reported."""
        document = {"versions": [{"version": "1.0.0", "manifest": {"package": {"name": "dictionary"}}}]}
        source = RegistrySource()
        with patch("vbablocks.sources.registry.get_json", new=AsyncMock(return_value=(200, {}, document))):
            with pytest.raises(ManifestInvalid):
                asyncio.run(source.lookup(_dependency("dictionary")))
