"""Tests for the npm, PyPI and Maven Central sources and the registry gateway."""

import asyncio
from unittest.mock import AsyncMock, Mock

import requests

from certin_mapper._enrichment.identifiers import ResolvedIdentifier
from certin_mapper._enrichment.registry import RegistryGateway, create_default_gateway
from certin_mapper._enrichment.results import LookupResult, ProviderResult
from certin_mapper._enrichment.sources.maven import MAVEN_SEARCH_URL, MavenCentralSource
from certin_mapper._enrichment.sources.npm import NpmSource
from certin_mapper._enrichment.sources.pypi import PyPISource

LODASH = ResolvedIdentifier(ecosystem="npm", name="lodash", version="4.17.20")
REQUESTS = ResolvedIdentifier(ecosystem="pypi", name="requests", version="2.30.0")
LANG3 = ResolvedIdentifier(ecosystem="maven", group="org.apache.commons", name="commons-lang3", version="3.12.0")


class TestNpmSource:
    """Test NpmSource fetch and normalization."""

    def test_fetch_success(self, cache, mock_session, http_response):
        """Test that the package document is normalized."""
        mock_session.get.return_value = http_response(
            json_data={
                "name": "lodash",
                "description": "Lodash modular utilities.",
                "dist-tags": {"latest": "4.17.21"},
                "time": {"created": "2012-04-23T16:37:11.912Z", "modified": "2023-01-01T00:00:00Z"},
                "homepage": "https://lodash.com/",
                "repository": {"type": "git", "url": "git+https://github.com/lodash/lodash.git"},
                "license": "MIT",
                "author": {"name": "John-David Dalton", "email": "john.david.dalton@gmail.com"},
            }
        )
        source = NpmSource(cache)

        result = asyncio.run(source.fetch(LODASH, mock_session))

        assert result.found
        metadata = result.value
        assert metadata.source == "registry.npmjs.org"
        assert metadata.release_date == "23-04-2012"
        assert metadata.latest_version == "4.17.21"
        assert metadata.description == "Lodash modular utilities."
        assert metadata.repository_url == "git+https://github.com/lodash/lodash.git"
        assert metadata.license == "MIT"
        assert metadata.author == "John-David Dalton"
        mock_session.get.assert_called_once_with("https://registry.npmjs.org/lodash", timeout=10)

    def test_scoped_package_url(self, cache, mock_session, http_response):
        """Test that the slash in a scoped name is percent-encoded."""
        mock_session.get.return_value = http_response(json_data={"name": "@angular/core"})
        source = NpmSource(cache)

        asyncio.run(source.fetch(ResolvedIdentifier(ecosystem="npm", name="@angular/core"), mock_session))

        assert mock_session.get.call_args[0][0] == "https://registry.npmjs.org/@angular%2Fcore"

    def test_legacy_license_and_author_string(self, cache, mock_session, http_response):
        """Test older document shapes for license and author."""
        mock_session.get.return_value = http_response(
            json_data={"license": {"type": "BSD-3-Clause"}, "author": "Jane Doe <jane@example.com>"}
        )

        result = asyncio.run(NpmSource(cache).fetch(LODASH, mock_session))

        assert result.value.license == "BSD-3-Clause"
        assert result.value.author == "Jane Doe"

    def test_not_found(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(status_code=404)

        result = asyncio.run(NpmSource(cache).fetch(LODASH, mock_session))

        assert not result.found
        assert result.reason == "not found"
        assert len(cache) == 0

    def test_timeout(self, cache, mock_session):
        mock_session.get.side_effect = requests.exceptions.Timeout()

        result = asyncio.run(NpmSource(cache).fetch(LODASH, mock_session))

        assert not result.found
        assert result.reason == "timeout"

    def test_malformed_json(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(json_error=ValueError("bad json"))

        result = asyncio.run(NpmSource(cache).fetch(LODASH, mock_session))

        assert not result.found

    def test_success_is_cached(self, cache, mock_session, http_response):
        """Test that a second fetch is served from the cache."""
        mock_session.get.return_value = http_response(json_data={"dist-tags": {"latest": "4.17.21"}})
        source = NpmSource(cache)

        asyncio.run(source.fetch(LODASH, mock_session))
        second = asyncio.run(source.fetch(LODASH, mock_session))

        assert second.value.latest_version == "4.17.21"
        assert mock_session.get.call_count == 1
        assert "npm:lodash" in cache

    def test_failure_is_retried(self, cache, mock_session, http_response):
        """Test that failures are not cached."""
        mock_session.get.side_effect = [
            http_response(status_code=503),
            http_response(json_data={"dist-tags": {"latest": "4.17.21"}}),
        ]
        source = NpmSource(cache)

        first = asyncio.run(source.fetch(LODASH, mock_session))
        second = asyncio.run(source.fetch(LODASH, mock_session))

        assert first.reason == "HTTP 503"
        assert second.found
        assert mock_session.get.call_count == 2


class TestPyPISource:
    """Test PyPISource fetch and normalization."""

    def test_fetch_success(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(
            json_data={
                "info": {
                    "name": "requests",
                    "version": "2.32.3",
                    "summary": "Python HTTP for Humans.",
                    "author": "Kenneth Reitz",
                    "license": "Apache-2.0",
                    "home_page": "https://requests.readthedocs.io",
                    "project_urls": {"Source": "https://github.com/psf/requests"},
                },
                "urls": [{"upload_time_iso_8601": "2024-05-29T15:37:47.027801Z"}],
            }
        )

        result = asyncio.run(PyPISource(cache).fetch(REQUESTS, mock_session))

        metadata = result.value
        assert metadata.source == "pypi.org"
        assert metadata.latest_version == "2.32.3"
        assert metadata.release_date == "29-05-2024"
        assert metadata.description == "Python HTTP for Humans."
        assert metadata.author == "Kenneth Reitz"
        assert metadata.license == "Apache-2.0"
        assert metadata.homepage == "https://requests.readthedocs.io"
        assert metadata.repository_url == "https://github.com/psf/requests"
        mock_session.get.assert_called_once_with("https://pypi.org/pypi/requests/json", timeout=10)

    def test_license_from_classifier_and_author_from_email(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(
            json_data={
                "info": {
                    "version": "1.0",
                    "license": "",
                    "classifiers": ["License :: OSI Approved :: MIT License"],
                    "author_email": "Jane Doe <jane@example.com>",
                },
                "urls": [],
            }
        )

        result = asyncio.run(PyPISource(cache).fetch(REQUESTS, mock_session))

        assert result.value.license == "MIT License"
        assert result.value.author == "Jane Doe"
        assert result.value.release_date is None

    def test_missing_info_is_malformed(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(json_data={"message": "Not Found"})

        result = asyncio.run(PyPISource(cache).fetch(REQUESTS, mock_session))

        assert not result.found
        assert result.reason == "malformed response"

    def test_connection_error(self, cache, mock_session):
        mock_session.get.side_effect = requests.exceptions.ConnectionError("down")

        result = asyncio.run(PyPISource(cache).fetch(REQUESTS, mock_session))

        assert not result.found
        assert result.reason == "request error"


class TestMavenCentralSource:
    """Test MavenCentralSource fetch and normalization."""

    def test_fetch_uses_first_document(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(
            json_data={
                "response": {
                    "numFound": 2,
                    "docs": [
                        {"g": "org.apache.commons", "a": "commons-lang3", "latestVersion": "3.14.0",
                         "timestamp": 1700000000000},
                        {"g": "org.apache.commons", "a": "commons-lang3", "latestVersion": "0.0.1"},
                    ],
                }
            }
        )

        result = asyncio.run(MavenCentralSource(cache).fetch(LANG3, mock_session))

        assert result.value.latest_version == "3.14.0"
        assert result.value.release_date == "14-11-2023"
        assert "maven:org.apache.commons:commons-lang3" in cache

        args, kwargs = mock_session.get.call_args
        assert args[0] == MAVEN_SEARCH_URL
        assert kwargs["params"] == {"q": 'g:"org.apache.commons" AND a:"commons-lang3"', "rows": 1, "wt": "json"}

    def test_no_documents(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(json_data={"response": {"numFound": 0, "docs": []}})

        result = asyncio.run(MavenCentralSource(cache).fetch(LANG3, mock_session))

        assert not result.found
        assert result.reason == "not found"

    def test_unexpected_shape(self, cache, mock_session, http_response):
        mock_session.get.return_value = http_response(json_data={"response": "oops"})

        result = asyncio.run(MavenCentralSource(cache).fetch(LANG3, mock_session))

        assert not result.found

    def test_group_required(self, cache, mock_session):
        identifier = ResolvedIdentifier(ecosystem="maven", name="commons-lang3")

        result = asyncio.run(MavenCentralSource(cache).fetch(identifier, mock_session))

        assert not result.found
        mock_session.get.assert_not_called()


class TestRegistryGateway:
    """Test ecosystem dispatch."""

    def test_default_gateway_ecosystems(self, cache):
        gateway = create_default_gateway(cache, timeout=5)
        assert gateway.supported_ecosystems() == ["maven", "npm", "pypi"]

    def test_dispatches_by_ecosystem(self, mock_session):
        npm = Mock(ecosystem="npm")
        npm.name = "npm"
        npm.fetch = AsyncMock(return_value=LookupResult.hit(ProviderResult(source="npm")))
        pypi = Mock(ecosystem="pypi")
        pypi.name = "pypi"
        pypi.fetch = AsyncMock()

        gateway = RegistryGateway()
        gateway.register(npm)
        gateway.register(pypi)

        result = asyncio.run(gateway.fetch(LODASH, mock_session))

        assert result.value.source == "npm"
        npm.fetch.assert_awaited_once_with(LODASH, mock_session)
        pypi.fetch.assert_not_awaited()

    def test_unknown_ecosystem_makes_no_request(self, cache, mock_session):
        gateway = create_default_gateway(cache, timeout=5)

        result = asyncio.run(gateway.fetch(ResolvedIdentifier(ecosystem="unknown", name="openssl"), mock_session))

        assert not result.found
        mock_session.get.assert_not_called()

    def test_unsupported_ecosystem(self, cache, mock_session):
        gateway = create_default_gateway(cache, timeout=5)

        result = asyncio.run(gateway.fetch(ResolvedIdentifier(ecosystem="cargo", name="serde"), mock_session))

        assert result.reason == "unsupported ecosystem: cargo"

    def test_source_exception_becomes_no_data(self, mock_session):
        broken = Mock(ecosystem="npm")
        broken.name = "broken"
        broken.fetch = AsyncMock(side_effect=RuntimeError("boom"))
        gateway = RegistryGateway()
        gateway.register(broken)

        result = asyncio.run(gateway.fetch(LODASH, mock_session))

        assert not result.found
        assert result.reason == "source error"
