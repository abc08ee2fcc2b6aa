from __future__ import annotations

import pytest

from ldpsync.domain.handle import IdentityMapper, ResourceHandle, join_uri


def test_join_uri_normalises_slashes() -> None:
    assert join_uri("http://repo.test/rest/", "/books/", "b1") == "http://repo.test/rest/books/b1"
    assert join_uri("http://repo.test/rest", "") == "http://repo.test/rest"


def test_handle_confirm_and_forget() -> None:
    handle = ResourceHandle()
    assert handle.is_new

    handle.confirm("http://repo.test/rest/b1", version='"1"')
    assert not handle.is_new
    assert handle.child("thumb") == "http://repo.test/rest/b1/thumb"

    handle.forget()
    assert handle.is_new
    assert handle.version is None
    assert handle.uri == "http://repo.test/rest/b1"


def test_handle_child_requires_uri() -> None:
    with pytest.raises(ValueError, match="no uri"):
        ResourceHandle().child("thumb")


def test_identity_mapper_round_trip_with_root() -> None:
    mapper = IdentityMapper("http://repo.test/rest/", "books")

    assert mapper.root_uri == "http://repo.test/rest/books"
    assert mapper.id_to_uri("b1") == "http://repo.test/rest/books/b1"
    assert mapper.uri_to_id("http://repo.test/rest/books/b1") == "b1"


def test_identity_mapper_passes_absolute_uris_through() -> None:
    mapper = IdentityMapper("http://repo.test/rest")

    assert mapper.id_to_uri("http://elsewhere.test/x/") == "http://elsewhere.test/x"


def test_identity_mapper_rejects_foreign_uri() -> None:
    mapper = IdentityMapper("http://repo.test/rest", "books")

    with pytest.raises(ValueError, match="not below"):
        mapper.uri_to_id("http://repo.test/rest/other/b1")
