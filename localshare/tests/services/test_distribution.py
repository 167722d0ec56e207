from collections.abc import Callable
from unittest.mock import patch

import pytest

from localshare.config import LocalShareConfig
from localshare.exceptions import AllocationError, ArtifactNotFoundError, InvalidRequestError
from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import IncomingFile, content_digest_key
from localshare.models.recipient import Availability
from localshare.services.catalog import ArtifactCatalog
from localshare.services.distribution import DistributionEngine
from localshare.services.registry import RecipientRegistry
from localshare.tests.services.constants import ALICE, BOB, CHARLIE


def visible_names(registry: RecipientRegistry, recipient_id: str) -> list[str]:
    return [a.display_name for a in registry.require(recipient_id).visible_artifacts]


@pytest.mark.parametrize(
    ("targets", "files"),
    [(set(), ["report.pdf"]), ({ALICE}, [])],
)
def test_share_rejects_empty_request_without_side_effects(
    engine: DistributionEngine,
    make_file: Callable[..., IncomingFile],
    targets: set[str],
    files: list[str],
) -> None:
    with pytest.raises(InvalidRequestError):
        engine.share(targets, [make_file(name) for name in files])

    assert len(engine.catalog) == 0
    assert len(engine.handles) == 0


def test_share_same_file_twice_is_idempotent(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    engine.share({ALICE}, [make_file("report.pdf")])
    result = engine.share({ALICE}, [make_file("report.pdf")])

    assert visible_names(engine.registry, ALICE) == ["report.pdf"]
    assert len(engine.catalog) == 1
    assert len(engine.handles) == 1
    assert result.shared_count == 1


def test_share_fans_out_single_artifact(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({ALICE, BOB}, [make_file("photo.jpg", "image/jpeg")])

    assert len(engine.catalog) == 1
    artifact = result.shared[0]
    assert engine.reference_count(artifact.artifact_id) == 2
    assert engine.registry.require(ALICE).visible_artifacts == (artifact,)
    assert engine.registry.require(BOB).visible_artifacts == (artifact,)
    assert result.recipients_reached == (ALICE, BOB)


def test_share_with_offline_recipient_reaches_nobody(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({CHARLIE}, [make_file()])

    assert result.reached_count == 0
    assert result.shared_count == 0
    assert engine.registry.require(CHARLIE).visible_artifacts == ()
    assert len(engine.catalog) == 0
    assert len(engine.handles) == 0


def test_share_skips_offline_and_unknown_targets(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({ALICE, CHARLIE, "user-9"}, [make_file()])

    assert result.recipients_reached == (ALICE,)
    assert visible_names(engine.registry, ALICE) == ["report.pdf"]
    assert visible_names(engine.registry, CHARLIE) == []


def test_share_counts_unsupported_files_without_raising(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({ALICE}, [make_file("report.pdf"), make_file("notes.txt", "text/plain")])

    assert result.shared_count == 1
    assert result.rejected_count == 1
    assert result.is_partial
    assert visible_names(engine.registry, ALICE) == ["report.pdf"]


def test_share_with_only_unsupported_files_is_noop(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({ALICE}, [make_file("a.txt", "text/plain"), make_file("b.zip", "")])

    assert result.shared_count == 0
    assert result.rejected_count == 2
    assert result.reached_count == 0
    assert len(engine.catalog) == 0


def test_share_reuses_artifact_for_recipients_who_lack_it(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    first = engine.share({ALICE}, [make_file()]).shared[0]
    second = engine.share({ALICE, BOB}, [make_file()]).shared[0]

    assert second is first
    assert engine.reference_count(first.artifact_id) == 2
    assert len(engine.handles) == 1


def test_share_deduplicates_names_within_one_batch(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    result = engine.share({ALICE}, [make_file("a.pdf"), make_file("a.pdf"), make_file("b.pdf")])

    assert [a.display_name for a in result.shared] == ["a.pdf", "b.pdf"]
    assert visible_names(engine.registry, ALICE) == ["a.pdf", "b.pdf"]


def test_offline_recipient_keeps_earlier_shares(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    engine.share({ALICE}, [make_file("old.pdf")])
    engine.registry.set_availability(ALICE, Availability.OFFLINE)

    engine.share({ALICE, BOB}, [make_file("new.pdf")])

    assert visible_names(engine.registry, ALICE) == ["old.pdf"]
    assert visible_names(engine.registry, BOB) == ["new.pdf"]


def test_allocation_failure_keeps_earlier_references(
    registry: RecipientRegistry, make_file: Callable[..., IncomingFile]
) -> None:
    engine = DistributionEngine(registry, config=LocalShareConfig(max_handles=1))

    with pytest.raises(AllocationError):
        engine.share({ALICE, BOB}, [make_file("a.pdf"), make_file("b.pdf")])

    assert visible_names(registry, ALICE) == ["a.pdf"]
    assert visible_names(registry, BOB) == ["a.pdf"]
    assert len(engine.catalog) == 1
    assert len(engine.handles) == 1


def test_revoke_releases_only_after_last_reference(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE, BOB}, [make_file()]).shared[0]

    with patch.object(handles, "release", wraps=handles.release) as release:
        assert engine.revoke(ALICE, artifact.artifact_id) is True
        assert artifact.artifact_id in engine.catalog
        assert handles.is_live(artifact.handle)
        release.assert_not_called()

        assert engine.revoke(BOB, artifact.artifact_id) is True

    release.assert_called_once_with(artifact.handle)
    assert artifact.artifact_id not in engine.catalog
    assert not handles.is_live(artifact.handle)


def test_revoke_from_all_releases_handle_once(
    registry: RecipientRegistry,
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE, BOB}, [make_file()]).shared[0]
    registry.add_reference(CHARLIE, artifact)

    with patch.object(handles, "release", wraps=handles.release) as release:
        affected = engine.revoke_from_all(artifact.artifact_id)

    assert affected == 3
    release.assert_called_once_with(artifact.handle)
    assert registry.reference_count(artifact.artifact_id) == 0
    assert artifact.artifact_id not in engine.catalog


def test_revoke_unknown_ids_is_noop(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE}, [make_file()]).shared[0]

    with patch.object(handles, "release", wraps=handles.release) as release:
        assert engine.revoke("user-9", "art_missing") is False
        assert engine.revoke(BOB, artifact.artifact_id) is False

    release.assert_not_called()
    assert engine.reference_count(artifact.artifact_id) == 1


def test_revoke_from_all_unknown_artifact_raises_not_found(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE}, [make_file()]).shared[0]
    engine.revoke_from_all(artifact.artifact_id)

    with patch.object(handles, "release", wraps=handles.release) as release:
        with pytest.raises(ArtifactNotFoundError):
            engine.revoke_from_all(artifact.artifact_id)
        with pytest.raises(ArtifactNotFoundError):
            engine.revoke_from_all("art_missing")

    release.assert_not_called()


def test_revoked_file_can_be_shared_again(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    first = engine.share({ALICE}, [make_file()]).shared[0]
    engine.revoke(ALICE, first.artifact_id)

    second = engine.share({ALICE}, [make_file()]).shared[0]

    assert second.artifact_id != first.artifact_id
    assert engine.registry.require(ALICE).visible_artifacts == (second,)


def test_viewer_hold_defers_release_until_close(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE, BOB}, [make_file("photo.png", "image/png", b"png")]).shared[0]
    viewer = engine.open_viewer(artifact.artifact_id)

    with patch.object(handles, "release", wraps=handles.release) as release:
        assert engine.revoke_from_all(artifact.artifact_id) == 2

        release.assert_not_called()
        assert handles.is_live(artifact.handle)
        assert viewer.read() == b"png"
        assert engine.reference_count(artifact.artifact_id) == 1

        viewer.close()

    release.assert_called_once_with(artifact.handle)
    assert artifact.artifact_id not in engine.catalog


def test_viewer_close_keeps_artifact_still_shared(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE}, [make_file()]).shared[0]

    engine.open_viewer(artifact.artifact_id).close()

    assert handles.is_live(artifact.handle)
    assert engine.reference_count(artifact.artifact_id) == 1


def test_single_revoke_while_viewing_defers_release(
    engine: DistributionEngine,
    handles: ResourceHandleManager,
    make_file: Callable[..., IncomingFile],
) -> None:
    artifact = engine.share({ALICE}, [make_file()]).shared[0]
    viewer = engine.open_viewer(artifact.artifact_id)

    engine.revoke(ALICE, artifact.artifact_id)
    assert handles.is_live(artifact.handle)

    viewer.close()
    assert not handles.is_live(artifact.handle)


def test_open_viewer_unknown_artifact_raises(engine: DistributionEngine) -> None:
    with pytest.raises(ArtifactNotFoundError):
        engine.open_viewer("art_missing")


def test_shared_artifacts_lists_recipients_per_artifact(
    engine: DistributionEngine, make_file: Callable[..., IncomingFile]
) -> None:
    engine.share({ALICE, BOB}, [make_file("a.pdf")])
    engine.share({BOB}, [make_file("b.png", "image/png")])

    overview = engine.shared_artifacts()

    assert [row.artifact.display_name for row in overview] == ["a.pdf", "b.png"]
    assert [r.recipient_id for r in overview[0].recipients] == [ALICE, BOB]
    assert overview[1].reference_count == 1


def test_close_releases_every_handle_and_reference(
    registry: RecipientRegistry,
    handles: ResourceHandleManager,
    catalog: ArtifactCatalog,
    make_file: Callable[..., IncomingFile],
) -> None:
    with DistributionEngine(registry, catalog, handles) as engine:
        shared = engine.share({ALICE, BOB}, [make_file("a.pdf"), make_file("b.pdf")]).shared
        engine.open_viewer(shared[0].artifact_id)

    assert len(handles) == 0
    assert len(catalog) == 0
    assert not engine.viewer.is_open
    assert visible_names(registry, ALICE) == []
    assert visible_names(registry, BOB) == []


def test_engine_builds_default_collaborators() -> None:
    engine = DistributionEngine()

    assert len(engine.registry) == 0
    assert len(engine.catalog) == 0
    assert len(engine.handles) == 0


def test_engine_keeps_injected_empty_registry() -> None:
    registry = RecipientRegistry()

    engine = DistributionEngine(registry)

    assert engine.registry is registry


def test_content_digest_identity_applies_to_share(
    make_file: Callable[..., IncomingFile],
) -> None:
    registry = RecipientRegistry()
    registry.provision(ALICE, "Alice")
    engine = DistributionEngine(registry, key_func=content_digest_key)

    result = engine.share(
        {ALICE}, [make_file("scan.pdf", payload=b"one"), make_file("scan.pdf", payload=b"two")]
    )

    assert result.shared_count == 2
    assert visible_names(registry, ALICE) == ["scan.pdf", "scan.pdf"]
