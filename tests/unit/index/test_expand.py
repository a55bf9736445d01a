from __future__ import annotations

from xref_index.index import (
    ALL_UNITS,
    DuplicatePolicy,
    ExpandResult,
    IndexChannel,
    NotFound,
    ShardKind,
)
from xref_index.render import RenderOptions, TextListTarget


def test_expand_missing_name_leaves_target_untouched() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS)
    target = TextListTarget()
    target.lines.append("existing")

    result = channel.consumer.expand("missing", target)

    assert isinstance(result, NotFound)
    assert result.name == "missing"
    assert target.lines == ["existing"]
    assert target.reset_count == 0


def test_expand_renders_records_in_sequence_order() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS)
    channel.consumer.initialize()
    channel.registrar.register({"crateA": [["impl <b>One</b>"], ["impl Two"]]})
    target = TextListTarget()

    result = channel.consumer.expand("crateA", target)

    assert result == ExpandResult(
        name="crateA", rendered=2, skipped=0, anchors=("impl-0", "impl-1")
    )
    assert target.lines == ["impl One", "impl Two"]


def test_expand_again_rerenders_full_current_sequence() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS)
    channel.consumer.initialize()
    channel.registrar.register({"crateA": [["first"]]})
    target = TextListTarget()
    channel.consumer.expand("crateA", target)

    channel.registrar.register({"crateA": [["second"]]})
    channel.consumer.expand("crateA", target)

    assert target.lines == ["first", "second"]
    assert target.reset_count == 2


def test_expand_all_skips_current_and_ignored_crates() -> None:
    options = RenderOptions(current_crate="home", ignore_extern_crates=("vendored",))
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS, options=options)
    channel.registrar.register({"home": [["h1"]], "other": [["o1"]], "vendored": [["v1"]]})
    channel.registrar.register({"later": [["l1"]]})
    channel.consumer.initialize()
    target = TextListTarget()

    result = channel.consumer.expand_all(target)

    assert not isinstance(result, NotFound)
    assert result.name == ALL_UNITS
    assert result.rendered == 2
    assert result.skipped == 2
    assert target.lines == ["o1", "l1"]


def test_expand_all_before_initialize_is_not_found() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS)

    assert isinstance(channel.consumer.expand_all(TextListTarget()), NotFound)


def test_expand_unit_without_records_leaves_target_untouched() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS)
    channel.consumer.initialize()
    channel.registrar.register({"crateA": []})
    target = TextListTarget()
    target.lines.append("existing")

    result = channel.consumer.expand("crateA", target)

    assert result == NotFound(name="crateA")
    assert target.lines == ["existing"]
    assert target.reset_count == 0


def test_expand_after_replace_with_empty_records_is_not_found() -> None:
    channel = IndexChannel.create(ShardKind.IMPLEMENTORS, duplicate_policy=DuplicatePolicy.REPLACE)
    channel.consumer.initialize()
    channel.registrar.register({"crateA": [["first"]]})
    target = TextListTarget()
    channel.consumer.expand("crateA", target)

    channel.registrar.register({"crateA": []})

    assert isinstance(channel.consumer.expand("crateA", target), NotFound)
    assert target.lines == ["first"]
