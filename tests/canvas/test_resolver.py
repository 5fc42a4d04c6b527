from __future__ import annotations

import pytest

from engine.canvas.errors import ResolutionError, TypeMismatch
from engine.canvas.reference_table import ReferenceTable
from engine.canvas.resolver import ref, resolve_params, spread_ref


def test_ref_placeholder_is_replaced(table: ReferenceTable) -> None:
    table.add_ref("x", 7)
    assert resolve_params(["#ref:x"], table) == [7]


def test_spread_ref_is_spliced_positionally(table: ReferenceTable) -> None:
    table.add_ref("g", [1, 2, 3])
    assert resolve_params(["#spreadRef:g", 4], table) == [1, 2, 3, 4]
    assert resolve_params([0, spread_ref("g"), ref("g")], table) == [0, 1, 2, 3, [1, 2, 3]]


def test_opaque_values_pass_through_by_identity(table: ReferenceTable) -> None:
    handle = object()
    table.add_ref("h", handle)
    out = resolve_params([ref("h"), "#ff0000"], table)
    assert out[0] is handle
    assert out[1] == "#ff0000"


def test_only_exact_prefix_strings_are_placeholders(table: ReferenceTable) -> None:
    params = ["ref:x", " #ref:x", ["#ref:x"], {"k": "#ref:x"}, 1.5, None, True]
    assert resolve_params(params, table) == params


def test_missing_id_raises_resolution_error(table: ReferenceTable) -> None:
    with pytest.raises(ResolutionError) as ei:
        resolve_params([ref("nope")], table)
    assert ei.value.ref_id == "nope"
    with pytest.raises(ResolutionError):
        resolve_params([spread_ref("nope")], table)


@pytest.mark.parametrize("value", ["abc", b"ab", {"a": 1}, 5, None])
def test_spread_of_non_sequence_is_type_mismatch(table: ReferenceTable, value) -> None:  # noqa: ANN001
    table.add_ref("bad", value)
    with pytest.raises(TypeMismatch):
        resolve_params([spread_ref("bad")], table)


def test_input_params_are_not_mutated(table: ReferenceTable) -> None:
    table.add_ref("g", (1, 2))
    params = (spread_ref("g"), 3)
    resolve_params(params, table)
    assert params == ("#spreadRef:g", 3)
