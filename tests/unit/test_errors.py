"""Unit tests for the tagged error type."""

from collection_box.core import CollectionBoxError, ErrorKind


class TestCollectionBoxError:
    """Tests for CollectionBoxError."""

    def test_str_includes_kind_and_message(self):
        err = CollectionBoxError.invalid_argument("url cannot be empty")
        assert str(err) == "invalid argument: url cannot be empty"

    def test_str_without_message(self):
        assert str(CollectionBoxError(ErrorKind.NOT_FOUND)) == "not found"

    def test_with_message_chains_context(self):
        base = CollectionBoxError.internal("store failure")
        chained = base.with_message("disk full")
        assert chained.kind is ErrorKind.INTERNAL
        assert chained.message == "store failure: disk full"
        assert base.message == "store failure"

    def test_with_message_on_bare_error(self):
        chained = CollectionBoxError.conflict().with_message("url exists")
        assert str(chained) == "conflict: url exists"

    def test_is_kind(self):
        err = CollectionBoxError.conflict("dup")
        assert err.is_kind(ErrorKind.CONFLICT)
        assert not err.is_kind(ErrorKind.INTERNAL)

    def test_partial_defaults_to_empty(self):
        assert CollectionBoxError.internal("x").partial == []

    def test_partial_is_kept_when_chaining(self):
        err = CollectionBoxError(ErrorKind.INTERNAL, "boom", partial=["a"])
        assert err.with_message("more").partial == ["a"]
