"""Tests for the Maven-layout artifact locator."""

from unittest.mock import patch

import pytest

from registry.maven.locator import MavenArtifactLocator
from versioning.models import (
    DependencyCoordinates,
    FailureKind,
    LocateFailure,
    LookupSources,
    RemoteRepository,
    ResolvedLocation,
    VersionSelector,
)
from conftest import metadata_xml

LATEST = DependencyCoordinates("com.acme", "contracts")


class TestLocalLookups:
    """Local-only sources never touch a remote repository."""

    def test_picks_highest_cached_version(self, local_repo, cache_module):
        cache_module("com.acme", "contracts", "1.0", {"v": b"1"})
        cache_module("com.acme", "contracts", "1.10", {"v": b"10"})
        cache_module("com.acme", "contracts", "1.9", {"v": b"9"})

        result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), LATEST)

        assert isinstance(result, ResolvedLocation)
        assert result.path.name == "contracts-1.10.jar"

    def test_version_directory_without_artifact_is_ignored(self, local_repo, cache_module):
        cache_module("com.acme", "contracts", "1.0", {"v": b"1"})
        (local_repo / "com" / "acme" / "contracts" / "3.0").mkdir()

        result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), LATEST)

        assert result.path.name == "contracts-1.0.jar"

    def test_missing_module_is_not_found(self, local_repo):
        result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), LATEST)

        assert isinstance(result, LocateFailure)
        assert result.kind == FailureKind.NOT_FOUND

    def test_exact_version(self, local_repo, cache_module):
        cache_module("com.acme", "contracts", "1.0", {"v": b"1"})
        cache_module("com.acme", "contracts", "2.0", {"v": b"2"})
        exact = LATEST.with_version("1.0")

        result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), exact)

        assert result.path.name == "contracts-1.0.jar"

    def test_remote_client_not_used(self, local_repo):
        locator = MavenArtifactLocator()
        with patch.object(locator.client, "fetch_metadata") as fetch, \
                patch.object(locator.client, "download_artifact") as download:
            locator.locate(LookupSources.local_only(local_repo), LATEST)
        fetch.assert_not_called()
        download.assert_not_called()

    @pytest.mark.parametrize("coordinates", [
        DependencyCoordinates("", "contracts"),
        DependencyCoordinates("com.acme", "../etc"),
        DependencyCoordinates("com.acme", "contracts", VersionSelector.EXACT, None),
    ])
    def test_malformed_coordinates(self, local_repo, coordinates):
        result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), coordinates)

        assert isinstance(result, LocateFailure)
        assert result.kind == FailureKind.INVALID_COORDINATES


class TestRemoteLookups:
    """Sources with a registered repository."""

    def _sources(self, local_repo, remote_repo):
        return MavenArtifactLocator().register_repository(
            LookupSources.local_only(local_repo), remote_repo.uri
        )

    def test_downloads_latest_into_cache(self, local_repo, remote_repo):
        remote_repo.publish("com.acme", "contracts", "1.0", {"v": b"1"})
        remote_repo.publish("com.acme", "contracts", "2.0", {"v": b"2"})

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        expected = local_repo / "com" / "acme" / "contracts" / "2.0" / "contracts-2.0.jar"
        assert isinstance(result, ResolvedLocation)
        assert result.path == expected.resolve()
        assert expected.is_file()
        cached = local_repo / "com" / "acme" / "contracts" / "maven-metadata-dependency-repository.xml"
        assert cached.is_file()

    def test_cached_metadata_is_served_even_if_stale(self, local_repo, remote_repo, cache_module):
        cache_module("com.acme", "contracts", "1.0", {"v": b"1"}, cached_metadata_versions=["1.0"])
        remote_repo.publish("com.acme", "contracts", "2.0", {"v": b"2"})

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        assert result.path.name == "contracts-1.0.jar"

    def test_classifier_artifact(self, local_repo, remote_repo):
        remote_repo.publish("com.acme", "contracts", "1.0", {"v": b"1"}, classifier="stubs")
        coordinates = DependencyCoordinates("com.acme", "contracts", classifier="stubs")

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), coordinates)

        assert result.path.name == "contracts-1.0-stubs.jar"

    def test_module_absent_remotely(self, local_repo, remote_repo):
        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        assert isinstance(result, LocateFailure)
        assert result.kind == FailureKind.NOT_FOUND

    def test_unreachable_file_root(self, local_repo, tmp_path):
        sources = LookupSources.local_only(local_repo).with_repository(
            RemoteRepository((tmp_path / "missing").as_uri())
        )

        result = MavenArtifactLocator().locate(sources, LATEST)

        assert isinstance(result, LocateFailure)
        assert result.kind == FailureKind.CONNECTIVITY

    def test_unparseable_metadata(self, local_repo, remote_repo):
        module_dir = remote_repo.module_dir("com.acme", "contracts")
        module_dir.mkdir(parents=True)
        (module_dir / "maven-metadata.xml").write_text("<metadata><oops>")

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        assert isinstance(result, LocateFailure)
        assert "malformed" in result.reason

    def test_http_metadata_404_is_not_found(self, local_repo):
        sources = LookupSources.local_only(local_repo).with_repository(
            RemoteRepository("https://repo.example.com/maven2")
        )
        with patch("registry.maven.client.http_client.robust_get", return_value=(404, {}, "")):
            result = MavenArtifactLocator().locate(sources, LATEST)

        assert result.kind == FailureKind.NOT_FOUND

    def test_http_transport_failure_is_connectivity(self, local_repo):
        sources = LookupSources.local_only(local_repo).with_repository(
            RemoteRepository("https://unknown-host.invalid/maven2")
        )
        with patch("registry.maven.client.http_client.robust_get",
                   return_value=(0, {}, "Request failed after 3 attempts: Name or service not known")):
            result = MavenArtifactLocator().locate(sources, LATEST)

        assert result.kind == FailureKind.CONNECTIVITY
        assert "Name or service not known" in result.reason

    def test_http_download(self, local_repo):
        sources = LookupSources.local_only(local_repo).with_repository(
            RemoteRepository("https://repo.example.com/maven2/")
        )
        body = metadata_xml("com.acme", "contracts", ["1.0", "1.1"])

        def fake_download(url, destination, **kwargs):
            with open(destination, "wb") as fh:
                fh.write(b"PK")
            return 200, None

        with patch("registry.maven.client.http_client.robust_get", return_value=(200, {}, body)) as get, \
                patch("registry.maven.client.http_client.robust_download", side_effect=fake_download) as dl:
            result = MavenArtifactLocator().locate(sources, LATEST)

        assert get.call_args[0][0] == "https://repo.example.com/maven2/com/acme/contracts/maven-metadata.xml"
        assert dl.call_args[0][0] == (
            "https://repo.example.com/maven2/com/acme/contracts/1.1/contracts-1.1.jar"
        )
        assert result.path.name == "contracts-1.1.jar"

    def test_maven_style_versions_are_resolved(self, local_repo, remote_repo):
        remote_repo.publish("com.acme", "contracts", "1.0.0.RELEASE", {"v": b"1"})
        remote_repo.publish("com.acme", "contracts", "1.1.0.RELEASE", {"v": b"2"})

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        assert isinstance(result, ResolvedLocation)
        assert result.path.name == "contracts-1.1.0.RELEASE.jar"

    @pytest.mark.parametrize("garbage", [b"<metadata><versioning>", b"\xff\xfe\x00broken"])
    def test_unusable_cached_metadata_is_refetched(self, local_repo, remote_repo, garbage):
        remote_repo.publish("com.acme", "contracts", "2.0", {"v": b"2"})
        cached = local_repo / "com" / "acme" / "contracts" / "maven-metadata-dependency-repository.xml"
        cached.parent.mkdir(parents=True)
        cached.write_bytes(garbage)

        result = MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        assert isinstance(result, ResolvedLocation)
        assert result.path.name == "contracts-2.0.jar"
        assert "<version>2.0</version>" in cached.read_text(encoding="utf-8")

    def test_malformed_remote_metadata_is_not_cached(self, local_repo, remote_repo):
        module_dir = remote_repo.module_dir("com.acme", "contracts")
        module_dir.mkdir(parents=True)
        (module_dir / "maven-metadata.xml").write_text("<metadata><oops>")

        MavenArtifactLocator().locate(self._sources(local_repo, remote_repo), LATEST)

        cache_dir = local_repo / "com" / "acme" / "contracts"
        assert not cache_dir.exists() or not any(cache_dir.iterdir())


def test_local_maven_style_versions(local_repo, cache_module):
    cache_module("com.acme", "contracts", "2.0.0.M1", {"v": b"m1"})
    cache_module("com.acme", "contracts", "1.9.0.RELEASE", {"v": b"1.9"})

    result = MavenArtifactLocator().locate(LookupSources.local_only(local_repo), LATEST)

    assert result.path.name == "contracts-2.0.0.M1.jar"
