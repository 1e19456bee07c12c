import argparse
from collections.abc import Callable
from pathlib import Path

import pytest

import natives_gen

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    natives = tmp_path / "natives.json"
    natives.write_text("{}\n", encoding="utf-8")

    header = tmp_path / "header.ts"
    header.write_text("// header\n", encoding="utf-8")

    output = tmp_path / "out" / "natives.ts"
    return {
        "natives": natives,
        "header": header,
        "output": output,
    }


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "natives": existing_paths["natives"],
            "header": existing_paths["header"],
            "output": existing_paths["output"],
            "debug": False,
            "debug_hash": None,
            "strict_names": False,
            "jobs": 1,
            "list_namespaces": False,
            "info": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_param() -> Callable[..., natives_gen.NativeParam]:
    def _make_param(
        name: str, type_name: str, ref: bool = False
    ) -> natives_gen.NativeParam:
        return natives_gen.NativeParam(name=name, type=type_name, ref=ref)

    return _make_param


@pytest.fixture
def make_raw_native() -> Callable[..., natives_gen.RawNative]:
    def _make_raw_native(
        *,
        name: str = "GET_PLAYER_PED",
        hash_key: str = "0x43A66C31C68491C0",
        namespace: str = "PLAYER",
        comment: str = "",
        params: tuple[tuple[str, str, bool], ...] = (),
        results: str = "void",
        alt_name: str | None = None,
    ) -> natives_gen.RawNative:
        return natives_gen.RawNative(
            namespace=namespace,
            hash=hash_key,
            name=name,
            comment=comment,
            params=tuple(
                natives_gen.RawParam(name=n, type=t, ref=r) for n, t, r in params
            ),
            results=results,
            alt_name=alt_name,
        )

    return _make_raw_native


@pytest.fixture
def make_native(
    make_raw_native: Callable[..., natives_gen.RawNative],
) -> Callable[..., natives_gen.NativeDef]:
    def _make_native(**kwargs: object) -> natives_gen.NativeDef:
        return natives_gen.build_native_def(make_raw_native(**kwargs))

    return _make_native
