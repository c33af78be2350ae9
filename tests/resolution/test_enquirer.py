"""Tests for the repository enquirer."""

import pytest
from aioresponses import aioresponses
from yarl import URL

from hoist.domain.coordinates import Coordinate, Repository
from hoist.domain.exceptions import ResolutionNotFoundError
from hoist.domain.hash_validation import HashAlgorithm
from hoist.downloads.downloader import Downloader
from hoist.resolution.enquirer import RepositoryEnquirer
from hoist.resolution.mirrors import PriorityMirrorSelector
from hoist.resolution.prober import HttpProber
from hoist.resolution.strategies import ChecksumPathStrategy

REPO_A = Repository(url="https://a.example.org/maven/")
REPO_B = Repository(url="https://b.example.org/maven/")
RELEASE = Coordinate.parse("org.example:lib:1.0")
SNAPSHOT = Coordinate.parse("org.example:lib:1.0-SNAPSHOT")
RELEASE_PATH = "org/example/lib/1.0/lib-1.0.jar"
SNAPSHOT_DIR = "org/example/lib/1.0-SNAPSHOT"

DESCRIPTOR = """<metadata><versioning><snapshot>
<timestamp>20240102.030405</timestamp><buildNumber>7</buildNumber>
</snapshot></versioning></metadata>"""


@pytest.fixture
def enquirer(aio_client, mock_logger):
    return RepositoryEnquirer(
        HttpProber(aio_client, logger=mock_logger),
        Downloader(aio_client, mock_logger),
        logger=mock_logger,
    )


def _requested(mock: aioresponses, method: str) -> set[str]:
    return {str(url) for (verb, url) in mock.requests if verb == method}


class TestReleaseResolution:
    """Test release resolution across repositories."""

    @pytest.mark.asyncio
    async def test_first_repository_that_serves_wins(self, enquirer):
        """A failed probe on A moves on to B; nothing is fetched from A."""
        with aioresponses() as mock:
            mock.head(REPO_A.url_for(RELEASE_PATH), status=404)
            mock.head(REPO_B.url_for(RELEASE_PATH), status=200)
            mock.head(REPO_B.url_for(RELEASE_PATH + ".sha1"), status=200)

            location = await enquirer.resolve(RELEASE, [REPO_A, REPO_B])

            assert not any(url.startswith(REPO_A.url) for url in _requested(mock, "GET"))

        assert location.download_url == REPO_B.url_for(RELEASE_PATH)
        assert location.checksum_url == REPO_B.url_for(RELEASE_PATH + ".sha1")
        assert location.algorithm == HashAlgorithm.SHA1
        assert location.repository == REPO_B.url
        assert not location.pinned

    @pytest.mark.asyncio
    async def test_missing_checksum_is_not_a_failure(self, enquirer):
        """Without a published checksum the location carries none."""
        with aioresponses() as mock:
            mock.head(REPO_A.url_for(RELEASE_PATH), status=200)
            mock.head(REPO_A.url_for(RELEASE_PATH + ".sha1"), status=404)

            location = await enquirer.resolve(RELEASE, [REPO_A])

        assert location.checksum_url is None

    @pytest.mark.asyncio
    async def test_release_never_fetches_descriptor(self, enquirer):
        """Release versions are probed directly."""
        with aioresponses() as mock:
            mock.head(REPO_A.url_for(RELEASE_PATH), status=200)
            mock.head(REPO_A.url_for(RELEASE_PATH + ".sha1"), status=200)

            await enquirer.resolve(RELEASE, [REPO_A])

            assert _requested(mock, "GET") == set()

    @pytest.mark.asyncio
    async def test_exhaustion_raises_not_found(self, enquirer):
        """No serving repository raises ResolutionNotFoundError naming all tried."""
        with aioresponses() as mock:
            mock.head(REPO_A.url_for(RELEASE_PATH), status=404)
            mock.head(REPO_B.url_for(RELEASE_PATH), status=404)

            with pytest.raises(ResolutionNotFoundError) as exc_info:
                await enquirer.resolve(RELEASE, [REPO_A, REPO_B])

        assert exc_info.value.coordinate == RELEASE
        assert exc_info.value.repositories == (REPO_A.url, REPO_B.url)

    @pytest.mark.asyncio
    async def test_mirror_selector_orders_repositories(self, aio_client, mock_logger):
        """The selector decides which repository is tried first."""
        enquirer = RepositoryEnquirer(
            HttpProber(aio_client, logger=mock_logger),
            Downloader(aio_client, mock_logger),
            mirror_selector=PriorityMirrorSelector(),
            checksum_strategy=ChecksumPathStrategy(HashAlgorithm.SHA256),
            logger=mock_logger,
        )
        preferred = Repository(url="https://c.example.org/", priority=10)
        with aioresponses() as mock:
            mock.head(preferred.url_for(RELEASE_PATH), status=200)
            mock.head(preferred.url_for(RELEASE_PATH + ".sha256"), status=200)

            location = await enquirer.resolve(RELEASE, [REPO_A, preferred])

        assert location.repository == preferred.url
        assert location.algorithm == HashAlgorithm.SHA256


class TestSnapshotResolution:
    """Test snapshot resolution through the version descriptor."""

    @pytest.mark.asyncio
    async def test_fetches_descriptor_and_uses_concrete_build(self, enquirer):
        """The descriptor's timestamp and build number name the artifact."""
        artifact = f"{SNAPSHOT_DIR}/lib-1.0-20240102.030405-7.jar"
        with aioresponses() as mock:
            mock.get(REPO_A.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml"), body=DESCRIPTOR)
            mock.head(REPO_A.url_for(artifact), status=200)
            mock.head(REPO_A.url_for(artifact + ".sha1"), status=200)

            location = await enquirer.resolve(SNAPSHOT, [REPO_A])

            assert (
                "GET",
                URL(REPO_A.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml")),
            ) in mock.requests

        assert location.download_url == REPO_A.url_for(artifact)

    @pytest.mark.asyncio
    async def test_descriptor_without_snapshot_uses_literal_name(self, enquirer):
        """A descriptor without a snapshot block falls back to -SNAPSHOT."""
        artifact = f"{SNAPSHOT_DIR}/lib-1.0-SNAPSHOT.jar"
        with aioresponses() as mock:
            mock.get(
                REPO_A.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml"),
                body="<metadata/>",
            )
            mock.head(REPO_A.url_for(artifact), status=200)
            mock.head(REPO_A.url_for(artifact + ".sha1"), status=404)

            location = await enquirer.resolve(SNAPSHOT, [REPO_A])

        assert location.download_url == REPO_A.url_for(artifact)

    @pytest.mark.asyncio
    async def test_missing_descriptor_skips_repository(self, enquirer):
        """A repository without the descriptor is skipped."""
        artifact = f"{SNAPSHOT_DIR}/lib-1.0-20240102.030405-7.jar"
        with aioresponses() as mock:
            mock.get(REPO_A.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml"), status=404)
            mock.get(REPO_B.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml"), body=DESCRIPTOR)
            mock.head(REPO_B.url_for(artifact), status=200)
            mock.head(REPO_B.url_for(artifact + ".sha1"), status=200)

            location = await enquirer.resolve(SNAPSHOT, [REPO_A, REPO_B])

        assert location.repository == REPO_B.url

    @pytest.mark.asyncio
    async def test_malformed_descriptor_skips_repository(self, enquirer):
        """An unparseable descriptor is treated like a missing one."""
        with aioresponses() as mock:
            mock.get(REPO_A.url_for(f"{SNAPSHOT_DIR}/maven-metadata.xml"), body="<oops")

            with pytest.raises(ResolutionNotFoundError):
                await enquirer.resolve(SNAPSHOT, [REPO_A])
