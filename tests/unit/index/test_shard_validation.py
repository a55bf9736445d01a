from __future__ import annotations

import pytest

from xref_index.index import (
    ImplementorRecord,
    Shard,
    ShardKind,
    ShardValidationError,
    UnitRecords,
    parse_shard,
)


def test_implementor_records_accept_bare_and_full_forms() -> None:
    shard = parse_shard(
        {"crateA": ["plain", ["listed"], ["auto", 1, ["String", "Vec<u8>"]]]},
        ShardKind.IMPLEMENTORS,
    )

    assert shard.names() == ("crateA",)
    assert shard.units[0].records == (
        ImplementorRecord(content="plain"),
        ImplementorRecord(content="listed"),
        ImplementorRecord(content="auto", type_tags=("String", "Vec<u8>"), synthetic=True),
    )


def test_type_impl_records_carry_trait_name_and_aliases() -> None:
    shard = parse_shard(
        {
            "assets_common": [
                ["<details>A</details>", "MatchesFungibles<AssetId, Balance>", "x::Alias"],
                ["<details>B</details>", 0, "x::Alias"],
                ["<details>C</details>", ""],
            ]
        },
        ShardKind.TYPE_IMPLS,
    )

    records = shard.units[0].records
    assert records[0].trait_name == "MatchesFungibles<AssetId, Balance>"
    assert records[0].type_tags == ("x::Alias",)
    assert records[1].trait_name is None
    assert records[2].trait_name is None
    assert records[2].type_tags == ()


def test_unit_order_follows_producer_order() -> None:
    shard = parse_shard({"zeta": [], "alpha": [], "mid": []}, ShardKind.IMPLEMENTORS)

    assert shard.names() == ("zeta", "alpha", "mid")


@pytest.mark.parametrize(
    ("payload", "code"),
    [
        (None, "INVALID_SHARD"),
        ("crateA", "INVALID_SHARD"),
        ([["crateA", []]], "INVALID_SHARD"),
        ({"": [["r"]]}, "INVALID_SHARD"),
        ({"crateA": "r"}, "INVALID_SHARD"),
        ({"crateA": {"r": 1}}, "INVALID_SHARD"),
        ({"crateA": [[]]}, "INVALID_RECORD"),
        ({"crateA": [[1]]}, "INVALID_RECORD"),
        ({"crateA": [["r", "yes"]]}, "INVALID_RECORD"),
        ({"crateA": [["r", True, "Foo"]]}, "INVALID_RECORD"),
        ({"crateA": [["r", True, [1]]]}, "INVALID_RECORD"),
        ({"crateA": [["r", False, [], "extra"]]}, "INVALID_RECORD"),
    ],
)
def test_malformed_implementor_payloads_are_rejected(payload: object, code: str) -> None:
    with pytest.raises(ShardValidationError) as error:
        parse_shard(payload, ShardKind.IMPLEMENTORS)

    assert error.value.code == code


def test_type_impl_with_invalid_trait_name_is_rejected() -> None:
    with pytest.raises(ShardValidationError) as error:
        parse_shard({"crateA": [["r", 5, "Alias"]]}, ShardKind.TYPE_IMPLS)

    assert error.value.code == "INVALID_RECORD"


def test_prebuilt_shard_of_other_kind_is_rejected() -> None:
    shard = Shard(
        kind=ShardKind.TYPE_IMPLS,
        units=(UnitRecords(name="crateA", records=(ImplementorRecord(content="r"),)),),
    )

    with pytest.raises(ShardValidationError) as error:
        parse_shard(shard, ShardKind.IMPLEMENTORS)

    assert error.value.code == "KIND_MISMATCH"


def test_prebuilt_shard_of_same_kind_passes_through() -> None:
    shard = Shard(kind=ShardKind.IMPLEMENTORS, units=())

    assert parse_shard(shard, ShardKind.IMPLEMENTORS) is shard


def test_prebuilt_shard_with_non_unit_entry_is_rejected() -> None:
    good = UnitRecords(name="a", records=(ImplementorRecord(content="x"),))
    units: tuple[object, ...] = (good, "junk")
    shard = Shard(kind=ShardKind.IMPLEMENTORS, units=units)  # type: ignore[arg-type]

    with pytest.raises(ShardValidationError) as error:
        parse_shard(shard, ShardKind.IMPLEMENTORS)

    assert error.value.code == "INVALID_SHARD"


def test_prebuilt_shard_with_malformed_record_is_rejected() -> None:
    record = ImplementorRecord(content=None)  # type: ignore[arg-type]
    shard = Shard(kind=ShardKind.IMPLEMENTORS, units=(UnitRecords(name="a", records=(record,)),))

    with pytest.raises(ShardValidationError) as error:
        parse_shard(shard, ShardKind.IMPLEMENTORS)

    assert error.value.code == "INVALID_SHARD"
    assert str(error.value) == "Records for unit 'a' must be well-formed ImplementorRecords."
