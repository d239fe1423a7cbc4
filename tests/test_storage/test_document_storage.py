"""test_document_storage.py
Comprehensive test suite for the mutation and read operations of:
  - DocumentStorage
"""

from dataclasses import FrozenInstanceError

import pytest

from src.exceptions import (
    DocumentConflictError,
    DocumentNotFoundError,
    InvalidUpdateError,
    VersionNotFoundError,
)
from src.models import DocumentStatus, SearchQuery, StoredDocument

from src.test_helpers.documents import make_processed_document


def updates_for(text, document_id):
    """Fields of a re-processed document, as passed to update()."""
    reprocessed = make_processed_document(text, document_id=document_id)
    return {
        "extracted_text": reprocessed.extracted_text,
        "structure": reprocessed.structure,
        "metadata": reprocessed.metadata,
    }


# ---------------------------------------------------------------------------
# store()
# ---------------------------------------------------------------------------
class TestStore:
    """Tests for DocumentStorage.store()."""

    def test_store_returns_id_and_indexes(self, storage):
        document = make_processed_document()
        doc_id = storage.store(document)

        assert doc_id == document.id
        assert doc_id in storage
        assert len(storage) == 1
        assert doc_id in storage.lookup_token("python")
        # Filename tokens are indexed too
        assert doc_id in storage.lookup_token("resume")

    def test_stored_record_fields(self, storage, clock):
        doc_id = storage.store(make_processed_document(), tags=["resume", "cv", "resume"])
        stored = storage.get_document(doc_id)

        assert isinstance(stored, StoredDocument)
        assert stored.status is DocumentStatus.ACTIVE
        assert stored.is_active
        assert stored.tags == ("resume", "cv")
        assert stored.versions == ()
        assert stored.created_at == stored.last_modified == clock.current

    def test_stop_words_and_short_tokens_not_indexed(self, storage):
        storage.store(make_processed_document("The developer is in Go"))
        assert storage.lookup_token("the") == frozenset()
        assert storage.lookup_token("go") == frozenset()
        assert storage.lookup_token("developer")

    def test_duplicate_id_conflicts(self, storage):
        document = make_processed_document()
        storage.store(document)

        with pytest.raises(DocumentConflictError) as exc_info:
            storage.store(document)

        assert exc_info.value.stage == "store"
        assert exc_info.value.identifier == document.id
        assert len(storage) == 1

    def test_duplicate_id_of_tombstone_conflicts(self, storage):
        document = make_processed_document()
        storage.store(document)
        storage.soft_delete(document.id)

        with pytest.raises(DocumentConflictError):
            storage.store(document)
        assert storage.get_document(document.id).status is DocumentStatus.DELETED


# ---------------------------------------------------------------------------
# update()
# ---------------------------------------------------------------------------
class TestUpdate:
    """Tests for DocumentStorage.update()."""

    def test_update_appends_one_version_per_call(self, storage):
        doc_id = storage.store(make_processed_document())

        for expected in range(1, 4):
            stored = storage.update(doc_id, {"filename": f"resume-v{expected}.txt"})
            assert len(stored.versions) == expected

        assert [v.version for v in storage.get_versions(doc_id)] == [1, 2, 3]
        assert [v.id for v in storage.get_versions(doc_id)] == ["version-1", "version-2", "version-3"]

    def test_version_snapshots_pre_update_state(self, storage):
        original = make_processed_document("SUMMARY\nJunior analyst")
        doc_id = storage.store(original)

        storage.update(doc_id, updates_for("SUMMARY\nSenior analyst", doc_id))
        version = storage.get_version(doc_id, 1)

        assert version.document_id == doc_id
        assert version.document == original
        assert version.metadata == original.metadata
        assert storage.get_document(doc_id).document.extracted_text == "SUMMARY\nSenior analyst"

    def test_update_records_section_changes(self, storage):
        doc_id = storage.store(make_processed_document("SUMMARY\nJunior analyst\nSKILLS\nexcel"))
        storage.update(doc_id, updates_for("SUMMARY\nSenior analyst\nPROJECTS\nsite", doc_id))

        changes = {(c.type, c.section) for c in storage.get_version(doc_id, 1).changes}
        assert changes == {
            ("modified", "SUMMARY"),
            ("removed", "SKILLS"),
            ("added", "PROJECTS"),
        }

    def test_update_bumps_last_modified_and_keeps_created_at(self, storage):
        doc_id = storage.store(make_processed_document())
        before = storage.get_document(doc_id)

        after = storage.update(doc_id, {"filename": "renamed.txt"})

        assert after.created_at == before.created_at
        assert after.last_modified > before.last_modified
        assert after.document.filename == "renamed.txt"

    def test_update_reindexes_from_scratch(self, storage):
        doc_id = storage.store(make_processed_document("SKILLS\nfortran"))
        storage.update(doc_id, {"extracted_text": "SKILLS\nrust"})

        assert storage.lookup_token("fortran") == frozenset()
        assert doc_id in storage.lookup_token("rust")
        assert storage.search(SearchQuery(content_search="fortran")).total_count == 0
        assert storage.search(SearchQuery(content_search="rust")).total_count == 1

    def test_update_with_same_id_is_allowed(self, storage):
        doc_id = storage.store(make_processed_document())
        stored = storage.update(doc_id, {"id": doc_id, "filename": "same.txt"})
        assert stored.id == doc_id

    @pytest.mark.parametrize(
        "updates",
        [
            {"unknown_field": 1},
            {"id": "doc-other"},
            {"extracted_text": 42},
            {"metadata": "not metadata"},
            ["filename", "x.txt"],
        ],
    )
    def test_invalid_update_leaves_state_unchanged(self, storage, updates):
        doc_id = storage.store(make_processed_document())
        before = storage.get_document(doc_id)

        with pytest.raises(InvalidUpdateError):
            storage.update(doc_id, updates)

        assert storage.get_document(doc_id) is before
        assert doc_id in storage.lookup_token("python")

    def test_update_unknown_id(self, storage):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            storage.update("doc-missing", {"filename": "x.txt"})
        assert exc_info.value.deleted is False
        assert "doc-missing" in str(exc_info.value)

    def test_update_tombstoned_id(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.soft_delete(doc_id)

        with pytest.raises(DocumentNotFoundError) as exc_info:
            storage.update(doc_id, {"filename": "x.txt"})
        assert exc_info.value.deleted is True

    def test_update_callable_receives_current_document(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.update(doc_id, {"filename": "first.txt"})

        seen = []

        def rename(current):
            seen.append(current.filename)
            return {"filename": current.filename.replace(".txt", "-2.txt")}

        stored = storage.update(doc_id, rename)

        assert seen == ["first.txt"]
        assert stored.document.filename == "first-2.txt"
        assert len(stored.versions) == 2

    def test_failing_update_callable_leaves_state_unchanged(self, storage):
        doc_id = storage.store(make_processed_document())
        before = storage.get_document(doc_id)

        def broken(current):
            raise InvalidUpdateError(current.id, "cannot rebuild")

        with pytest.raises(InvalidUpdateError):
            storage.update(doc_id, broken)
        assert storage.get_document(doc_id) is before

    def test_pages_given_as_list_are_stored_as_tuple(self, storage):
        document = make_processed_document()
        doc_id = storage.store(document)

        stored = storage.update(doc_id, {"pages": list(document.pages)})
        assert stored.document.pages == document.pages
        assert isinstance(stored.document.pages, tuple)


# ---------------------------------------------------------------------------
# Immutability of stored records and version snapshots
# ---------------------------------------------------------------------------
class TestRecordImmutability:
    """Records handed to callers cannot be used to rewrite stored state."""

    def test_search_result_cannot_rewrite_version_history(self, storage):
        doc_id = storage.store(make_processed_document("SKILLS\nPython"))
        storage.update(doc_id, {"filename": "b.txt"})

        structure = storage.search().documents[0].document.structure
        with pytest.raises(FrozenInstanceError):
            structure.sections[0].content = "HACKED\n"
        with pytest.raises(AttributeError):
            structure.sections.append(structure.sections[0])

        snapshot = storage.get_version(doc_id, 1).document
        assert snapshot.structure.sections[0].content == "Python\n"
        assert len(snapshot.structure.sections) == 1

    def test_nested_sequences_are_tuples(self, storage):
        doc_id = storage.store(make_processed_document("SKILLS\n- python\n- sql"))
        document = storage.get_document(doc_id).document

        assert isinstance(document.pages, tuple)
        assert isinstance(document.pages[0].text_blocks, tuple)
        assert isinstance(document.structure.lists[0].items, tuple)
        with pytest.raises(FrozenInstanceError):
            document.structure.lists[0].items = ("go",)


# ---------------------------------------------------------------------------
# Per-document locks
# ---------------------------------------------------------------------------
class TestDocumentLocks:
    """Per-id locks exist only for stored documents."""

    def test_failed_mutations_on_unknown_ids_allocate_no_locks(self, storage):
        doc_id = storage.store(make_processed_document())

        for i in range(100):
            missing_id = f"doc-missing-{i}"
            with pytest.raises(DocumentNotFoundError):
                storage.update(missing_id, {"filename": "x.txt"})
            with pytest.raises(DocumentNotFoundError):
                storage.soft_delete(missing_id)
            with pytest.raises(DocumentNotFoundError):
                storage.add_tags(missing_id, ["cv"])
            with pytest.raises(DocumentNotFoundError):
                storage.remove_tags(missing_id, ["cv"])

        assert set(storage._document_locks) == {doc_id}

    def test_tombstoned_document_keeps_its_lock(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.soft_delete(doc_id)

        with pytest.raises(DocumentNotFoundError) as exc_info:
            storage.add_tags(doc_id, ["cv"])
        assert exc_info.value.deleted is True
        assert set(storage._document_locks) == {doc_id}


# ---------------------------------------------------------------------------
# soft_delete()
# ---------------------------------------------------------------------------
class TestSoftDelete:
    """Tests for DocumentStorage.soft_delete()."""

    def test_delete_hides_document_and_clears_index(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.update(doc_id, {"filename": "resume-2.txt"})

        deleted = storage.soft_delete(doc_id)

        assert deleted.status is DocumentStatus.DELETED
        assert doc_id not in storage
        assert len(storage) == 0
        assert storage.search().total_count == 0
        assert storage.search(SearchQuery(content_search="python")).total_count == 0
        for token in ("summary", "experienced", "python", "developer", "resume"):
            assert doc_id not in storage.lookup_token(token)

    def test_history_survives_delete(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.update(doc_id, {"filename": "resume-2.txt"})
        storage.soft_delete(doc_id)

        assert [v.version for v in storage.get_versions(doc_id)] == [1]
        assert storage.get_document(doc_id).versions[0].version == 1

    def test_delete_bumps_last_modified(self, storage):
        doc_id = storage.store(make_processed_document())
        before = storage.get_document(doc_id).last_modified
        assert storage.soft_delete(doc_id).last_modified > before

    def test_delete_twice(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.soft_delete(doc_id)
        with pytest.raises(DocumentNotFoundError):
            storage.soft_delete(doc_id)

    def test_delete_unknown(self, storage):
        with pytest.raises(DocumentNotFoundError):
            storage.soft_delete("doc-missing")

    def test_other_documents_unaffected(self, storage):
        keep = storage.store(make_processed_document())
        drop = storage.store(make_processed_document())
        storage.soft_delete(drop)

        assert storage.lookup_token("python") == frozenset({keep})


# ---------------------------------------------------------------------------
# add_tags() / remove_tags()
# ---------------------------------------------------------------------------
class TestTags:
    """Tests for tag mutations."""

    def test_add_tags_is_idempotent(self, storage):
        doc_id = storage.store(make_processed_document())

        assert storage.add_tags(doc_id, ["x"]) is True
        after_first = storage.get_document(doc_id)
        assert storage.add_tags(doc_id, ["x"]) is False
        after_second = storage.get_document(doc_id)

        assert after_second.tags.count("x") == 1
        assert after_second.last_modified == after_first.last_modified

    def test_add_tags_keeps_order(self, storage):
        doc_id = storage.store(make_processed_document(), tags=["resume"])
        storage.add_tags(doc_id, ["senior", "resume", "python", "senior"])
        assert storage.get_document(doc_id).tags == ("resume", "senior", "python")

    def test_remove_tags(self, storage):
        doc_id = storage.store(make_processed_document(), tags=["a", "b", "c"])
        before = storage.get_document(doc_id).last_modified

        assert storage.remove_tags(doc_id, ["b", "missing"]) is True
        stored = storage.get_document(doc_id)
        assert stored.tags == ("a", "c")
        assert stored.last_modified > before

    def test_remove_absent_tags_is_noop(self, storage):
        doc_id = storage.store(make_processed_document(), tags=["a"])
        before = storage.get_document(doc_id)

        assert storage.remove_tags(doc_id, ["z"]) is False
        assert storage.get_document(doc_id) is before

    def test_tags_on_unknown_or_deleted(self, storage):
        with pytest.raises(DocumentNotFoundError):
            storage.add_tags("doc-missing", ["x"])

        doc_id = storage.store(make_processed_document())
        storage.soft_delete(doc_id)
        with pytest.raises(DocumentNotFoundError):
            storage.remove_tags(doc_id, ["x"])

    def test_tag_changes_do_not_create_versions(self, storage):
        doc_id = storage.store(make_processed_document())
        storage.add_tags(doc_id, ["x"])
        storage.remove_tags(doc_id, ["x"])
        assert storage.get_versions(doc_id) == []


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
class TestReads:
    """Tests for the read-only accessors."""

    def test_get_document_unknown_returns_none(self, storage):
        assert storage.get_document("doc-missing") is None
        assert storage.get_document_metadata("doc-missing") is None

    def test_get_document_metadata(self, storage):
        document = make_processed_document(size=2048)
        storage.store(document)
        assert storage.get_document_metadata(document.id).size == 2048

    def test_get_all_documents_excludes_tombstones(self, storage):
        first = storage.store(make_processed_document())
        second = storage.store(make_processed_document())
        storage.soft_delete(first)

        assert [stored.id for stored in storage.get_all_documents()] == [second]

    def test_get_versions_unknown(self, storage):
        with pytest.raises(DocumentNotFoundError):
            storage.get_versions("doc-missing")

    @pytest.mark.parametrize("version", [0, 2, -1])
    def test_get_version_out_of_range(self, storage, version):
        doc_id = storage.store(make_processed_document())
        storage.update(doc_id, {"filename": "v2.txt"})

        with pytest.raises(VersionNotFoundError) as exc_info:
            storage.get_version(doc_id, version)
        assert exc_info.value.version == version
        assert isinstance(exc_info.value, DocumentNotFoundError)

    def test_compare_versions(self, storage):
        doc_id = storage.store(make_processed_document("SUMMARY\nJunior analyst"))
        storage.update(doc_id, updates_for("SUMMARY\nSenior analyst", doc_id))
        storage.update(doc_id, updates_for("SUMMARY\nSenior analyst\nSKILLS\nsql", doc_id))

        changes = storage.compare_versions(doc_id, 1, 2)
        assert [(c.type, c.section) for c in changes] == [("modified", "SUMMARY")]
        assert changes[0].old_content == "Junior analyst\n"
        assert changes[0].new_content == "Senior analyst\n"

        assert storage.compare_versions(doc_id, 2, 2) == []

    def test_lookup_token_returns_copy(self, storage):
        doc_id = storage.store(make_processed_document())
        ids = storage.lookup_token("PYTHON")
        assert ids == frozenset({doc_id})
        assert isinstance(ids, frozenset)
