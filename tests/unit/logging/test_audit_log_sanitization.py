from __future__ import annotations

import json

from xref_index.logging import sanitize_arguments
from xref_index.session import create_session


def test_shard_payload_is_summarised_not_logged() -> None:
    secret_html = '<a href="internal/secret.html">Secret</a>'

    metadata = sanitize_arguments(
        {"kind": "implementors", "shard": {"crateB": [[secret_html]], "crateA": [["x"], ["y"]]}}
    )

    assert metadata == {
        "kind": "implementors",
        "shard_units": ["crateA", "crateB"],
        "shard_record_count": 3,
    }
    assert "secret" not in json.dumps(metadata)


def test_unknown_string_values_are_reduced_to_length() -> None:
    metadata = sanitize_arguments({"note": "token=abc123", "limit": 5})

    assert metadata == {"limit": 5, "note_length": len("token=abc123"), "note_present": True}


def test_session_audit_entry_omits_rendered_content() -> None:
    session = create_session(doc_root=".")
    session.handle_payload(
        {
            "id": "req-200",
            "method": "xref.register",
            "params": {"kind": "implementors", "shard": {"crateA": [["impl Hidden"]]}},
        }
    )

    response = session.handle_payload({"id": "req-201", "method": "xref.audit_log", "params": {}})
    entry = response["result"]["entries"][-1]

    assert entry["metadata"]["shard_units"] == ["crateA"]
    assert "impl Hidden" not in json.dumps(entry)
