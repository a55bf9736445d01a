from __future__ import annotations

from xref_index.session import create_session


def _call(session: object, method: str, **params: object) -> dict[str, object]:
    return session.handle_payload(  # type: ignore[attr-defined]
        {"id": f"req-{method}", "method": method, "params": params}
    )


def test_shard_before_initialize_is_flushed() -> None:
    session = create_session(doc_root=".")

    registered = _call(session, "xref.register", shard={"crateA": [["r1"], ["r2"]]})
    initialized = _call(session, "xref.initialize")
    looked_up = _call(session, "xref.lookup", name="crateA")

    assert registered["result"]["status"] == "queued"
    assert initialized["result"]["channels"]["implementors"] == {
        "initialized": True,
        "flushed_shards": 1,
    }
    assert [record["content"] for record in looked_up["result"]["records"]] == ["r1", "r2"]


def test_registrations_after_initialize_append() -> None:
    session = create_session(doc_root=".")
    _call(session, "xref.initialize")

    _call(session, "xref.register", shard={"crateA": [["r1"]]})
    _call(session, "xref.register", shard={"crateA": [["r2"]]})
    looked_up = _call(session, "xref.lookup", name="crateA")

    assert [record["content"] for record in looked_up["result"]["records"]] == ["r1", "r2"]


def test_expand_missing_before_any_registration_is_not_found() -> None:
    session = create_session(doc_root=".")

    response = _call(session, "xref.expand", name="missing")

    assert response["ok"] is False
    assert response["error"]["code"] == "NOT_FOUND"
    assert response["result"] == {}


def test_malformed_shard_does_not_disturb_other_names() -> None:
    session = create_session(doc_root=".")
    _call(session, "xref.initialize")
    _call(session, "xref.register", shard={"crateA": [["r1"]]})

    rejected = _call(session, "xref.register", shard="not-a-mapping")
    looked_up = _call(session, "xref.lookup", name="crateA")

    assert rejected["ok"] is False
    assert rejected["error"]["code"] == "VALIDATION_ERROR"
    assert [record["content"] for record in looked_up["result"]["records"]] == ["r1"]


def test_second_initialize_reports_no_flush() -> None:
    session = create_session(doc_root=".")
    _call(session, "xref.register", kind="type_impls", shard={"c": [["<details/>", "T", "c::A"]]})
    _call(session, "xref.initialize", kind="type_impls")

    again = _call(session, "xref.initialize", kind="type_impls")
    status = _call(session, "xref.status")

    assert again["result"]["channels"] == {
        "type_impls": {"initialized": False, "flushed_shards": 0}
    }
    channels = status["result"]["channels"]
    assert channels["type_impls"]["record_count"] == 1
    assert channels["type_impls"]["units"] == ["c"]
    assert channels["implementors"]["status"] == "uninitialized"


def test_expand_text_and_html_outputs() -> None:
    session = create_session(doc_root=".")
    session.initialize()
    _call(
        session,
        "xref.register",
        shard={"crateA": [['impl Clone for <a href="crateA/struct.Foo.html">Foo</a>']]},
    )

    text = _call(session, "xref.expand", name="crateA", format="text")
    html = _call(session, "xref.expand", name="crateA", format="html", anchor_offset=4)

    assert text["result"]["output"] == {"lines": ["impl Clone for Foo"]}
    assert html["result"]["anchors"] == ["impl-4"]
    assert html["result"]["output"]["implementors"][0].startswith('<div id="impl-4" class="impl">')


def test_expand_rejects_unknown_format() -> None:
    session = create_session(doc_root=".")

    response = _call(session, "xref.expand", name="crateA", format="pdf")

    assert response["error"]["code"] == "INVALID_PARAMS"
