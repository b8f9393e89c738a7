"""
Tests for DeclarationRegistry and the JSON metadata provider
"""

import pytest

from appfunctions_pilot.core.exceptions import FunctionNotFoundError
from appfunctions_pilot.core.metadata import PackageMetadata
from appfunctions_pilot.runtime.discovery import JsonMetadataProvider
from appfunctions_pilot.runtime.registry import EMPTY_SNAPSHOT, DeclarationRegistry

from conftest import TOOL_PACKAGE, StaticMetadataProvider, function_id, make_function


@pytest.fixture
def registry():
    return DeclarationRegistry(TOOL_PACKAGE)


class TestUpdate:

    def test_update_installs_declarations(self, registry, tool_package, caplog):
        snapshot = registry.update([tool_package])

        assert len(snapshot) == len(tool_package.app_functions)
        assert registry.snapshot is snapshot
        assert registry.app_description.startswith("Sample tool exposing demo functions.")
        assert f"Received {len(tool_package.app_functions)} functions from {TOOL_PACKAGE}" in caplog.text

    def test_other_packages_are_ignored(self, registry, tool_package):
        other = PackageMetadata(package_name="com.example.other", app_functions=[make_function("X", "x")])

        registry.update([other, tool_package])

        assert len(registry.declarations) == len(tool_package.app_functions)

    def test_missing_target_package_clears_cache(self, registry, tool_package, caplog):
        registry.update([tool_package])

        snapshot = registry.update([PackageMetadata(package_name="com.example.other")])

        assert snapshot is EMPTY_SNAPSHOT
        assert registry.declarations == ()
        assert "Unable to find functions for the target package" in caplog.text

    def test_update_replaces_wholesale(self, registry, tool_package):
        registry.update([tool_package])
        reduced = PackageMetadata(package_name=TOOL_PACKAGE, app_functions=[make_function("AddImpl", "add")])

        registry.update([reduced])

        assert registry.snapshot.names() == [function_id("AddImpl", "add")]

    def test_reader_keeps_its_snapshot(self, registry, tool_package):
        registry.update([tool_package])
        held = registry.snapshot

        registry.clear()

        assert len(registry.snapshot) == 0
        assert len(held) == len(tool_package.app_functions)
        assert held.get(function_id("AddImpl", "add")) is not None


class TestLookup:

    def test_require_by_identifier_and_short_name(self, registry, tool_package):
        registry.update([tool_package])

        by_id = registry.require(function_id("AddImpl", "add"))

        assert registry.require("add") is by_id
        assert registry.get(by_id.name) is by_id

    def test_require_unknown_function(self, registry, tool_package):
        registry.update([tool_package])

        with pytest.raises(FunctionNotFoundError) as exc_info:
            registry.require("multiply")

        assert function_id("AddImpl", "add") in exc_info.value.available_functions

    def test_metadata_of_declaration(self, registry, tool_package):
        registry.update([tool_package])
        declaration = registry.require("disabledFunction")

        metadata = registry.get_metadata(declaration)

        assert metadata.id == declaration.name
        assert metadata.is_enabled is False


class TestProviders:

    @pytest.mark.asyncio
    async def test_refresh(self, registry, tool_package):
        provider = StaticMetadataProvider([tool_package])

        snapshot = await registry.refresh(provider)

        assert provider.fetch_count == 1
        assert registry.snapshot is snapshot
        assert registry.snapshot.has(function_id("GetWeatherImpl", "getWeather"))

    @pytest.mark.asyncio
    async def test_watch_applies_every_update(self, registry, tool_package):
        reduced = PackageMetadata(package_name=TOOL_PACKAGE, app_functions=[make_function("AddImpl", "add")])
        provider = StaticMetadataProvider([tool_package], [reduced])

        await registry.watch(provider)

        assert len(registry.declarations) == 1

    @pytest.mark.asyncio
    async def test_json_provider(self, registry, metadata_file, tool_package, caplog):
        await registry.refresh(JsonMetadataProvider(str(metadata_file)))

        assert len(registry.declarations) == len(tool_package.app_functions)
        assert "Successfully fetched" in caplog.text

    @pytest.mark.asyncio
    async def test_json_provider_without_target(self, metadata_file):
        registry = DeclarationRegistry("com.example.other")

        await registry.refresh(JsonMetadataProvider(str(metadata_file)))

        assert registry.declarations == ()
