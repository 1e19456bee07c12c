from collections.abc import Callable

import pytest

import natives_gen

HASH = "0x3FEF770D40960D5A"
WORDS = ["0x3fef770d", "0x40960d5a"]


def test_build_invoke_args_starts_with_hash_words_high_first(
    make_native: Callable[..., natives_gen.NativeDef],
) -> None:
    native = make_native(hash_key=HASH)

    assert natives_gen.build_invoke_args(native) == WORDS


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("func", "_mfr(p)"),
        ("float", "_fv(p)"),
        ("Hash", "_ch(p)"),
        ("object", "..._obj(p)"),
        ("string", "_ts(p)"),
        ("char", "_ts(p)"),
        ("int", "p"),
        ("Ped", "p"),
        ("boolean", "p"),
        ("Vector3", "p"),
        ("Unknown", "p"),
    ],
)
def test_value_params_get_primitive_wrappers(
    make_native: Callable[..., natives_gen.NativeDef], declared: str, expected: str
) -> None:
    native = make_native(hash_key=HASH, params=(("p", declared, False),))

    assert natives_gen.build_invoke_args(native) == [*WORDS, expected]


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("int", "_ii(p)"),
        ("Entity", "_ii(p)"),
        ("float", "_fi(p)"),
        ("Vector3", "_v"),
        ("boolean", "_i"),
        ("string", "_i"),
    ],
)
def test_single_reference_param_uses_seeded_cell(
    make_native: Callable[..., natives_gen.NativeDef], declared: str, expected: str
) -> None:
    native = make_native(
        hash_key=HASH, params=(("a", "int", False), ("p", declared, True))
    )

    assert natives_gen.build_invoke_args(native) == [*WORDS, "a", expected]


def test_multiple_reference_params_use_bare_cells(
    make_native: Callable[..., natives_gen.NativeDef],
) -> None:
    native = make_native(
        hash_key=HASH,
        params=(
            ("i", "int", True),
            ("f", "float", True),
            ("v", "Vector3", True),
            ("b", "boolean", True),
        ),
    )

    assert natives_gen.build_invoke_args(native) == [*WORDS, "_i", "_f", "_v", "_i"]


def test_void_result_appends_nothing(
    make_native: Callable[..., natives_gen.NativeDef],
) -> None:
    native = make_native(hash_key=HASH, params=(("ms", "int", False),), results="void")

    args = natives_gen.build_invoke_args(native)

    assert args == [*WORDS, "ms"]
    assert "_r" not in args


def test_boolean_result_omits_reader(
    make_native: Callable[..., natives_gen.NativeDef],
) -> None:
    native = make_native(hash_key=HASH, results="boolean")

    assert natives_gen.build_invoke_args(native) == [*WORDS, "_r"]


@pytest.mark.parametrize(
    ("results", "reader"),
    [
        ("string", "_s"),
        ("char", "_s"),
        ("float", "_rf"),
        ("Vector3", "_rv"),
        ("long", "_rl"),
        ("int", "_ri"),
        ("Ped", "_ri"),
        ("object", "_ro"),
        ("Hash", "_ri"),
        ("Any", "_ri"),
        ("[float]", "_rf"),
    ],
)
def test_result_reader_follows_primary_result_type(
    make_native: Callable[..., natives_gen.NativeDef], results: str, reader: str
) -> None:
    native = make_native(hash_key=HASH, results=results)

    assert natives_gen.build_invoke_args(native) == [*WORDS, "_r", reader]


def test_format_invoke_call_joins_arguments(
    make_native: Callable[..., natives_gen.NativeDef],
) -> None:
    native = make_native(
        hash_key=HASH,
        params=(("entity", "Entity", False), ("alive", "boolean", False)),
        results="Vector3",
    )

    assert (
        natives_gen.format_invoke_call(native)
        == "_in(0x3fef770d, 0x40960d5a, entity, alive, _r, _rv)"
    )
