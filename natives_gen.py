"""Typed TypeScript wrappers generator for hash-invoked natives.

Generates one exported TypeScript function per native descriptor found in
a natives.json database. Each wrapper marshals its arguments into a single
`_in(...)` invocation and unmarshals the result(s).

Usage:
    natives-gen --natives bin/natives.json --header src/header.ts --output src/natives.ts
"""

import argparse
import json
import multiprocessing
import os
import re
import sys
import tempfile
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

DEFAULT_NATIVES = Path("bin") / "natives.json"
DEFAULT_HEADER = Path("src") / "header.ts"
DEFAULT_OUTPUT = Path("src") / "natives.ts"


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    natives: Path
    header: Path
    output: Path
    allow_list: frozenset[int] | None
    strict_names: bool = False
    jobs: int = 1


@dataclass(frozen=True)
class DiscoveryConfig:
    command: str
    info_hash: int | None
    natives: Path


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "INVALID_HASH",
    "HASH_WITHOUT_DEBUG",
    "CONFLICT_GENERATE_DISCOVERY",
    "INVALID_JOBS",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


class NativeDBError(ValueError):
    """Raised when natives.json does not have the expected shape."""


class NameCollisionError(RuntimeError):
    """Raised in strict mode when two natives normalize to one identifier."""


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def validate_hash_arg(raw: str, flag: str) -> int:
    try:
        return parse_hash(raw)
    except ValueError as err:
        raise ConfigError(
            "INVALID_HASH",
            f"Invalid native hash for {flag}: {raw}",
            "Pass a 64-bit hash as hex (0x3FEF770D40960D5A) or decimal.",
        ) from err


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate typed TypeScript wrappers for natives"
    )

    parser.add_argument("--natives", type=Path, default=DEFAULT_NATIVES)
    parser.add_argument("--header", type=Path, default=DEFAULT_HEADER)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)

    parser.add_argument("--debug", action="store_true", default=DEBUG_ENABLED)
    parser.add_argument("--debug-hash", action="append", default=None)
    parser.add_argument("--strict-names", action="store_true", default=False)
    parser.add_argument("--jobs", type=int, default=1)

    discovery_group = parser.add_mutually_exclusive_group()
    discovery_group.add_argument(
        "--list-namespaces", action="store_true", default=False
    )
    discovery_group.add_argument("--info", type=str, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    has_discovery_command = bool(args.list_namespaces or args.info)
    has_generate_input = bool(args.debug or args.debug_hash or args.strict_names)

    if has_generate_input and has_discovery_command:
        raise ConfigError(
            "CONFLICT_GENERATE_DISCOVERY",
            "Generate flags cannot be combined with discovery flags.",
            "Choose either generate mode or one discovery command.",
        )

    natives = validate_path_exists(
        args.natives,
        "--natives",
        "Dump the natives database to bin/natives.json\n"
        "Or pass a custom path: --natives /your/path/to/natives.json",
    )

    if has_discovery_command:
        if args.list_namespaces:
            return DiscoveryConfig(
                command="list-namespaces", info_hash=None, natives=natives
            )
        return DiscoveryConfig(
            command="info",
            info_hash=validate_hash_arg(args.info, "--info"),
            natives=natives,
        )

    if args.debug_hash and not args.debug:
        raise ConfigError(
            "HASH_WITHOUT_DEBUG",
            "--debug-hash requires --debug.",
            "Add --debug or remove --debug-hash.",
        )

    if args.jobs < 1:
        raise ConfigError(
            "INVALID_JOBS",
            f"--jobs must be at least 1, got {args.jobs}",
            "Use --jobs 1 for sequential generation.",
        )

    header = validate_path_exists(
        args.header,
        "--header",
        "The header is prepended verbatim to the output.\n"
        "Pass a custom path: --header /your/path/to/header.ts",
    )

    allow_list: frozenset[int] | None = None
    if args.debug:
        raw_hashes = args.debug_hash if args.debug_hash else DEBUG_NATIVES
        allow_list = frozenset(
            validate_hash_arg(raw, "--debug-hash") for raw in raw_hashes
        )

    return GenerateConfig(
        natives=natives,
        header=header,
        output=args.output,
        allow_list=allow_list,
        strict_names=bool(args.strict_names),
        jobs=args.jobs,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Constants ---=== #

NATIVE_PARAM_TYPES = {
    "int": "int",
    "Any": "int",
    "float": "float",
    "boolean": "boolean",
    "Vehicle": "int",
    "Cam": "int",
    "Vector3": "Vector3",
    "FireId": "int",
    "Pickup": "int",
    "string": "string",
    "Hash": "hash",
    "Ped": "int",
    "Entity": "int",
    "Object": "int",
    "Player": "int",
    "ScrHandle": "int",
    "Blip": "int",
    "Interior": "int",
}

SURFACE_TYPES = {
    "string": "string",
    "boolean": "boolean",
    "int": "number",
    "float": "number",
    "Vector3": "Vector3",
    "hash": "number",
}
SURFACE_FALLBACK = "any"
VOID = "void"

# Result readers, keyed by the primary result's primitive type.
NATIVE_RESULT_READERS = {
    "string": "_s",
    "char": "_s",
    "float": "_rf",
    "Vector3": "_rv",
    "long": "_rl",
    "int": "_ri",
    "object": "_ro",
}
DEFAULT_RESULT_READER = "_ri"

# Seeded output cells, used only when a native has exactly one reference param.
SEEDED_REF_CELLS = {
    "int": "_ii",
    "float": "_fi",
}
REF_CELLS = {
    "int": "_i",
    "float": "_f",
    "Vector3": "_v",
}
DEFAULT_REF_CELL = "_i"

VALUE_WRAPPERS = {
    "func": "_mfr({name})",
    "float": "_fv({name})",
    "hash": "_ch({name})",
    "object": "..._obj({name})",
    "string": "_ts({name})",
    "char": "_ts({name})",
}

INVOKE_FN = "_in"
RESULT_REQUEST = "_r"
VECTOR_RETURN_WRAPPER = "_mv"

IGNORABLE_NAME_PREFIX = "_"

DEBUG_NATIVES: tuple[str, ...] = (
    "0x3FEF770D40960D5A",
    "0xECB2FC7235A7D137",
    "0xEEF059FAD016D209",
    "0x2975C866E6713290",
    "0xA6E9C38DB51D7748",
    "0xBE8CD9BE829BBEBF",
    "0x7B3703D2D32DFA18",
)
"""Hashes emitted when --debug is passed without --debug-hash."""

DEBUG_ENABLED = False

_HASH_MAX = 0xFFFFFFFFFFFFFFFF
_HEX_HASH_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_DEC_HASH_RE = re.compile(r"^[0-9]+$")


# ===--- Type mapping ---=== #


def map_param_type(declared: str) -> str:
    return NATIVE_PARAM_TYPES.get(declared, declared)


def map_surface_type(primitive: str) -> str:
    return SURFACE_TYPES.get(primitive, SURFACE_FALLBACK)


def _strip_brackets(spec: str) -> str:
    return spec.replace("[", "").replace("]", "")


def map_return_primitive_type(spec: str) -> str:
    stripped = _strip_brackets(spec)
    if stripped == VOID:
        return VOID
    return map_param_type(stripped)


def map_return_surface_type(spec: str) -> str:
    primitive = map_return_primitive_type(spec)
    if primitive == VOID:
        return VOID
    return map_surface_type(primitive)


# ===--- Hash splitting ---=== #


class HashWords(NamedTuple):
    high: str
    low: str


def parse_hash(raw: int | str) -> int:
    """Parse a native hash from an int, a 0x-prefixed hex string or a decimal string.

    Raises:
        ValueError: If raw is not a non-negative integer that fits in 64 bits.
    """
    if isinstance(raw, bool):
        raise ValueError(f"Invalid native hash: {raw!r}")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if _HEX_HASH_RE.match(text):
            value = int(text[2:], 16)
        elif _DEC_HASH_RE.match(text):
            value = int(text, 10)
        else:
            raise ValueError(f"Invalid native hash: {raw!r}")
    else:
        raise ValueError(f"Invalid native hash: {raw!r}")

    if value < 0 or value > _HASH_MAX:
        raise ValueError(f"Native hash out of 64-bit range: {raw!r}")
    return value


def split_hash(hash_value: int) -> HashWords:
    high = (hash_value >> 32) & 0xFFFFFFFF
    low = hash_value & 0xFFFFFFFF
    return HashWords(high=f"0x{high:08x}", low=f"0x{low:08x}")


# ===--- Name normalization ---=== #


def normalize_name(raw_name: str) -> str:
    name = raw_name.removeprefix(IGNORABLE_NAME_PREFIX)
    first, *rest = name.split("_")
    return first.lower() + "".join(part[:1].upper() + part[1:].lower() for part in rest)


# ===--- Data classes ---=== #


@dataclass(frozen=True)
class RawParam:
    name: str
    type: str
    ref: bool = False


@dataclass(frozen=True)
class RawNative:
    """One native record exactly as it appears in natives.json.

    Attributes:
        namespace: Top-level namespace key, e.g. "ENTITY".
        hash: Hash key string, e.g. "0x06843DA7060A026B".
        name: Native identifier, e.g. "SET_ENTITY_COORDS".
        comment: Free-text documentation. Empty when absent.
        params: Declared params in call order.
        results: Raw results spec, e.g. "void" or "BOOL, float, Vector3".
        alt_name: Alternate display name used for output ordering, or None.
    """

    namespace: str
    hash: str
    name: str
    comment: str = ""
    params: tuple[RawParam, ...] = ()
    results: str = ""
    alt_name: str | None = None


@dataclass(frozen=True)
class NativeParam:
    name: str
    type: str
    ref: bool

    @property
    def surface_type(self) -> str:
        return map_surface_type(self.type)


@dataclass(frozen=True)
class NativeDef:
    """Normalized descriptor of one native, ready for generation.

    Attributes:
        hash: 64-bit native hash.
        name: Original identifier, e.g. "_GET_HASH_KEY".
        comment: Free-text documentation, possibly multi-line.
        params: Params in declaration order, type resolved to its primitive.
        results: Surface types of the results spec. Never empty; the first
            entry is the primary return type or "void".
        result_types: Primitive types matching results one-to-one.
        namespace: Source namespace, carried for reporting.
        alt_name: Alternate display name, carried for reporting.
    """

    hash: int
    name: str
    comment: str
    params: tuple[NativeParam, ...]
    results: tuple[str, ...]
    result_types: tuple[str, ...]
    namespace: str = ""
    alt_name: str | None = None

    @property
    def reference_params(self) -> tuple[NativeParam, ...]:
        return tuple(p for p in self.params if p.ref)

    @property
    def is_single_pointer(self) -> bool:
        return len(self.reference_params) == 1

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    @property
    def hex_hash(self) -> str:
        return f"0x{self.hash:016X}"


# ===--- natives.json parsing ---=== #


def _optional_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def parse_raw_param(entry: object, where: str) -> RawParam:
    if not isinstance(entry, dict):
        raise NativeDBError(
            f"{where}: param must be an object, got {type(entry).__name__}"
        )
    return RawParam(
        name=_optional_str(entry.get("name")),
        type=_optional_str(entry.get("type")),
        ref=bool(entry.get("ref", False)),
    )


def parse_raw_native(namespace: str, hash_key: str, record: object) -> RawNative:
    where = f"{namespace}.{hash_key}"
    if not isinstance(record, dict):
        raise NativeDBError(
            f"{where}: native must be an object, got {type(record).__name__}"
        )
    raw_params = record.get("params") or []
    if not isinstance(raw_params, list):
        raise NativeDBError(f"{where}: params must be a list")
    alt_name = record.get("altName")
    return RawNative(
        namespace=namespace,
        hash=hash_key,
        name=_optional_str(record.get("name")),
        comment=_optional_str(record.get("comment")),
        params=tuple(parse_raw_param(p, where) for p in raw_params),
        results=_optional_str(record.get("results")),
        alt_name=alt_name if isinstance(alt_name, str) else None,
    )


def parse_native_db(data: object) -> list[RawNative]:
    """Flatten a decoded natives.json document into RawNative records.

    Order follows the document: namespaces first, then hashes within each.

    Raises:
        NativeDBError: If the document or a namespace is not a JSON object.
    """
    if not isinstance(data, dict):
        raise NativeDBError("natives database must be an object of namespaces")
    natives: list[RawNative] = []
    for namespace, entries in data.items():
        if not isinstance(entries, dict):
            raise NativeDBError(f"namespace {namespace} must be an object of natives")
        for hash_key, record in entries.items():
            natives.append(parse_raw_native(namespace, hash_key, record))
    return natives


def load_native_db(path: Path) -> list[RawNative]:
    with Path(path).open("r", encoding="utf-8") as handle:
        return parse_native_db(json.load(handle))


# ===--- Descriptor construction ---=== #


def _split_results(spec: str) -> list[str] | None:
    segments = spec.split(", ")
    if not spec.strip() or any(not s.strip() for s in segments):
        return None
    return [s.strip() for s in segments]


def parse_results(spec: str) -> tuple[str, ...]:
    segments = _split_results(spec)
    if segments is None:
        return (VOID,)
    return tuple(map_return_surface_type(s) for s in segments)


def parse_result_types(spec: str) -> tuple[str, ...]:
    segments = _split_results(spec)
    if segments is None:
        return (VOID,)
    return tuple(map_return_primitive_type(s) for s in segments)


def build_native_def(raw: RawNative) -> NativeDef:
    """Build the descriptor for one record.

    Unknown param and result types degrade to fallbacks; only the hash key
    can fail.

    Raises:
        NativeDBError: If raw.hash is not a valid 64-bit hash.
    """
    try:
        hash_value = parse_hash(raw.hash)
    except ValueError as err:
        raise NativeDBError(f"{raw.namespace}.{raw.hash}: {err}") from err
    params = tuple(
        NativeParam(name=p.name, type=map_param_type(p.type), ref=p.ref)
        for p in raw.params
    )
    return NativeDef(
        hash=hash_value,
        name=raw.name,
        comment=raw.comment,
        params=params,
        results=parse_results(raw.results),
        result_types=parse_result_types(raw.results),
        namespace=raw.namespace,
        alt_name=raw.alt_name,
    )


# ===--- Invocation arguments ---=== #


def format_ref_arg(param: NativeParam, single_pointer: bool) -> str:
    if single_pointer and param.type in SEEDED_REF_CELLS:
        return f"{SEEDED_REF_CELLS[param.type]}({param.name})"
    return REF_CELLS.get(param.type, DEFAULT_REF_CELL)


def format_value_arg(param: NativeParam) -> str:
    wrapper = VALUE_WRAPPERS.get(param.type)
    if wrapper is None:
        return param.name
    return wrapper.format(name=param.name)


def native_result_reader(primitive: str) -> str:
    return NATIVE_RESULT_READERS.get(primitive, DEFAULT_RESULT_READER)


def build_invoke_args(native: NativeDef) -> list[str]:
    """Return the ordered argument expressions passed to `_in(...)`.

    Layout: high hash word, low hash word, one expression per param in
    declaration order, then `_r` and a result reader when the native
    returns something. Boolean results get `_r` only.
    """
    words = split_hash(native.hash)
    args = [words.high, words.low]

    single_pointer = native.is_single_pointer
    for param in native.params:
        if param.ref:
            args.append(format_ref_arg(param, single_pointer))
        else:
            args.append(format_value_arg(param))

    if native.results[0] != VOID:
        args.append(RESULT_REQUEST)
        if native.results[0] != "boolean":
            args.append(native_result_reader(native.result_types[0]))

    return args


def format_invoke_call(native: NativeDef) -> str:
    return f"{INVOKE_FN}({', '.join(build_invoke_args(native))})"


# ===--- Signature and body ---=== #


def build_params(native: NativeDef) -> list[str]:
    single_pointer = native.is_single_pointer
    return [
        f"{p.name}: {p.surface_type}"
        for p in native.params
        if not p.ref or single_pointer
    ]


def format_return_type(native: NativeDef) -> str:
    """Declared return type: the primary result, or a tuple of the rest.

    A native with several reference params but no results past the primary
    declares the reference params' surface types, matching the tuple that
    build_body returns.
    """
    if len(native.results) <= 1:
        refs = native.reference_params
        if len(refs) > 1:
            return f"[{', '.join(p.surface_type for p in refs)}]"
        return native.results[0]
    return f"[{', '.join(native.results[1:])}]"


def format_return_wrapper(param: NativeParam) -> str:
    surface = param.surface_type
    if surface == "Vector3":
        return f"{VECTOR_RETURN_WRAPPER}({param.name})"
    return f"{param.name} as {surface}"


def build_body(native: NativeDef) -> str:
    refs = native.reference_params
    call = format_invoke_call(native)
    if len(refs) <= 1:
        return f"return {call}"
    names = ", ".join(p.name for p in refs)
    wrapped = ", ".join(format_return_wrapper(p) for p in refs)
    return f"const [{names}] = {call};\n\treturn [{wrapped}]"


# ===--- Documentation ---=== #


def trim_and_normalize(line: str) -> str:
    return line.strip().replace("/*", " -- [[").replace("*/", "]] ")


def format_doc(native: NativeDef) -> str:
    if not native.comment:
        return ""
    lines = ["/**"]
    for line in native.comment.split("\n"):
        lines.append(f" * {trim_and_normalize(line)}")
    lines.extend(f" * @param {p.name}" for p in native.params)
    lines.append(" */")
    return "\n".join(lines) + "\n"


# ===--- Function emitter ---=== #


def generate_function(native: NativeDef) -> str:
    signature = (
        f"export function {native.normalized_name}"
        f"({', '.join(build_params(native))}): {format_return_type(native)}"
    )
    return f"\n{format_doc(native)}{signature} {{ \n\t{build_body(native)}; \n}}\n"


# ===--- Driver ---=== #


@dataclass(frozen=True)
class HeaderTemplate:
    """Static preamble prepended verbatim to the generated document.

    Read once per run by load_header_template and passed explicitly to
    assemble_output.

    Attributes:
        text: Full header text.
        path: File the header was read from, or None for in-memory headers.
    """

    text: str
    path: Path | None = None


def load_header_template(path: Path) -> HeaderTemplate:
    return HeaderTemplate(text=Path(path).read_text(encoding="utf-8"), path=Path(path))


def _sort_key(raw: RawNative) -> str:
    return raw.alt_name if raw.alt_name is not None else raw.name


def sort_natives(natives: list[RawNative]) -> list[RawNative]:
    return sorted(natives, key=_sort_key)


def select_natives(
    natives: list[RawNative], allow_list: frozenset[int] | None
) -> list[RawNative]:
    """Keep natives whose hash is in allow_list. None keeps every native.

    Records whose hash does not parse are kept so build_native_def reports
    them, except when an allow-list is active (they cannot match it).
    """
    if allow_list is None:
        return list(natives)
    selected = []
    for raw in natives:
        try:
            value = parse_hash(raw.hash)
        except ValueError:
            continue
        if value in allow_list:
            selected.append(raw)
    return selected


def find_name_collisions(
    natives: list[NativeDef],
) -> dict[str, tuple[NativeDef, ...]]:
    by_name: dict[str, list[NativeDef]] = defaultdict(list)
    for native in natives:
        by_name[native.normalized_name].append(native)
    return {
        name: tuple(group) for name, group in sorted(by_name.items()) if len(group) > 1
    }


def generate_functions(natives: list[NativeDef], jobs: int = 1) -> list[str]:
    """Generate every function, optionally across a worker pool.

    Pool.map returns results in input order, so output is identical for
    any jobs value.
    """
    if jobs <= 1 or len(natives) < 2:
        return [generate_function(n) for n in natives]
    with multiprocessing.Pool(min(jobs, len(natives))) as pool:
        return pool.map(generate_function, natives)


def assemble_output(
    template: HeaderTemplate, natives: list[NativeDef], jobs: int = 1
) -> str:
    return template.text + "".join(generate_functions(natives, jobs))


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing the generated document.

    Attributes:
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    path: Path
    line_count: int
    byte_count: int


def write_output(path: Path, content: str) -> FileWriteResult:
    """Write the generated document in one shot.

    Creates the parent directory if absent. Content goes to a temporary
    file in the same directory first and is moved into place with
    os.replace, so a failed write leaves no partial output behind.

    Raises:
        OSError: Propagated directly if the filesystem write fails.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8")
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return FileWriteResult(
        path=path.resolve(),
        line_count=content.count("\n"),
        byte_count=len(data),
    )


# ===--- Discovery commands ---=== #


@dataclass(frozen=True)
class NamespaceSummary:
    name: str
    native_count: int


@dataclass(frozen=True)
class NativeDetail:
    """Full --info output for one native.

    Attributes:
        native: Descriptor built from the matching record.
        generated: TypeScript emitted for the native.
    """

    native: NativeDef
    generated: str


def gather_namespace_summaries(natives: list[RawNative]) -> list[NamespaceSummary]:
    counts: dict[str, int] = {}
    for raw in natives:
        counts[raw.namespace] = counts.get(raw.namespace, 0) + 1
    return [NamespaceSummary(name, count) for name, count in counts.items()]


def gather_native_detail(
    natives: list[RawNative], hash_value: int
) -> NativeDetail | None:
    for raw in natives:
        try:
            matches = parse_hash(raw.hash) == hash_value
        except ValueError:
            continue
        if matches:
            native = build_native_def(raw)
            return NativeDetail(native=native, generated=generate_function(native))
    return None


def format_namespaces_table(summaries: list[NamespaceSummary]) -> str:
    """Return the complete --list-namespaces output as a string.

    Output format:

        3 namespaces, 512 natives:

          ENTITY     211 natives
          PLAYER     198 natives
          ...
    """
    total = sum(s.native_count for s in summaries)
    lines = [f"{len(summaries)} namespaces, {total} natives:", ""]
    name_width = max((len(s.name) for s in summaries), default=0)
    for s in summaries:
        lines.append(f"  {s.name.ljust(name_width)}  {s.native_count:>5} natives")
    lines.append("")
    return "\n".join(lines)


def format_native_detail(detail: NativeDetail) -> str:
    native = detail.native
    lines = [f"{native.name} ({native.namespace})"]
    lines.append(f"  Hash:       {native.hex_hash}")
    lines.append(f"  Identifier: {native.normalized_name}")
    lines.append(f"  Results:    {', '.join(native.results)}")
    lines.append("")
    lines.append(f"  Params ({len(native.params)}):")
    for p in native.params:
        ref_label = "  ref" if p.ref else ""
        lines.append(f"    {p.name}: {p.type}{ref_label}")
    lines.append("")
    lines.append("  Generated:")
    for line in detail.generated.strip("\n").split("\n"):
        lines.append(f"    {line}".rstrip())
    lines.append("")
    return "\n".join(lines)


def run_discovery(config: DiscoveryConfig) -> None:
    """Execute the discovery command specified in config.

    Raises:
        SystemExit(1): When config.command == "info" and no native has
            config.info_hash.
    """
    natives = load_native_db(config.natives)

    if config.command == "list-namespaces":
        print(format_namespaces_table(gather_namespace_summaries(natives)), end="")

    elif config.command == "info":
        assert config.info_hash is not None
        detail = gather_native_detail(natives, config.info_hash)
        if detail is None:
            print(
                f"Error: native 0x{config.info_hash:016X} not found in "
                f"{config.natives}",
                file=sys.stderr,
            )
            raise SystemExit(1)
        print(format_native_detail(detail), end="")


# ===--- Generation pipeline ---=== #


@dataclass(frozen=True)
class GenerationResult:
    """Everything run_generate produced, consumed by the summary report.

    Attributes:
        natives: Descriptors emitted, in output order.
        total_records: Records read from natives.json before filtering.
        collisions: Normalized identifiers shared by more than one native.
        write: Result of writing the output document.
    """

    natives: tuple[NativeDef, ...]
    total_records: int
    collisions: dict[str, tuple[NativeDef, ...]]
    write: FileWriteResult


def check_collisions(
    collisions: dict[str, tuple[NativeDef, ...]], strict: bool
) -> None:
    for name, group in collisions.items():
        hashes = ", ".join(n.hex_hash for n in group)
        message = f"identifier '{name}' generated for {len(group)} natives: {hashes}"
        if strict:
            raise NameCollisionError(message)
        print(f"  Warning: {message}")


def run_generate(config: GenerateConfig) -> GenerationResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    Stages: load -> sort -> filter -> build descriptors -> collision check
    -> assemble -> write -> summary. Nothing is written unless every stage
    before the write succeeded.

    Raises:
        OSError: natives.json or header not readable, or write failure.
        json.JSONDecodeError: natives.json is not valid JSON.
        NativeDBError: natives.json does not have the expected shape, or
            a native hash key does not parse.
        NameCollisionError: strict_names is set and identifiers collide.
    """
    print(f"Reading: {config.natives}")
    raw_natives = load_native_db(config.natives)
    template = load_header_template(config.header)
    print(f"  Database: {len(raw_natives)} natives")

    ordered = sort_natives(raw_natives)
    selected = select_natives(ordered, config.allow_list)
    if config.allow_list is not None:
        print(f"  Debug filter: {len(selected)} of {len(ordered)} natives kept")

    natives = [build_native_def(raw) for raw in selected]
    collisions = find_name_collisions(natives)
    check_collisions(collisions, config.strict_names)

    content = assemble_output(template, natives, config.jobs)
    write = write_output(config.output, content)
    print(f"  Written: {write.line_count} lines to {write.path}")

    result = GenerationResult(
        natives=tuple(natives),
        total_records=len(raw_natives),
        collisions=collisions,
        write=write,
    )
    print_generation_summary(build_generation_summary(result))
    return result


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class NamespaceCount:
    name: str
    count: int


@dataclass(frozen=True)
class GenerationSummary:
    """Complete, immutable data for the post-generation console report.

    Invariant: emitted + filtered_out == total_records.

    Attributes:
        output: Output path as string.
        total_records: Records read from natives.json.
        emitted: Functions written.
        filtered_out: Records dropped by the debug allow-list.
        namespaces: Emitted function count per namespace, sorted by name.
        collisions: Colliding identifiers, sorted.
        line_count: Lines in the written document.
        byte_count: Bytes in the written document.
    """

    output: str
    total_records: int
    emitted: int
    filtered_out: int
    namespaces: tuple[NamespaceCount, ...]
    collisions: tuple[str, ...]
    line_count: int
    byte_count: int


def build_generation_summary(result: GenerationResult) -> GenerationSummary:
    counts: dict[str, int] = defaultdict(int)
    for native in result.natives:
        counts[native.namespace] += 1
    emitted = len(result.natives)
    return GenerationSummary(
        output=str(result.write.path),
        total_records=result.total_records,
        emitted=emitted,
        filtered_out=result.total_records - emitted,
        namespaces=tuple(NamespaceCount(name, counts[name]) for name in sorted(counts)),
        collisions=tuple(sorted(result.collisions)),
        line_count=result.write.line_count,
        byte_count=result.write.byte_count,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary as the console report.

    The filtered line appears only when the debug filter dropped records;
    the collisions section appears only when there are collisions.
    Returns a string with exactly one trailing newline.
    """
    lines: list[str] = []
    lines.append("Natives generated:")
    lines.append("")
    lines.append(f"  Output:     {summary.output}")
    lines.append(f"  Natives:    {summary.emitted} of {summary.total_records}")
    if summary.filtered_out:
        lines.append(f"  Filtered:   {summary.filtered_out} (debug allow-list)")
    lines.append("")
    lines.append("  Namespaces:")
    name_width = max((len(ns.name) for ns in summary.namespaces), default=0)
    for ns in summary.namespaces:
        lines.append(f"    {ns.name.ljust(name_width)}  {ns.count:>6}")

    if summary.collisions:
        lines.append("")
        lines.append(f"  Name collisions ({len(summary.collisions)}):")
        for name in summary.collisions:
            lines.append(f"    {name}")

    lines.append("")
    lines.append(
        f"  Total: {summary.line_count:,} lines, {summary.byte_count:,} bytes"
    )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Main generation ---=== #


def main():
    try:
        config = build_config()
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
        else:
            run_generate(config)
    except (OSError, json.JSONDecodeError, NativeDBError, NameCollisionError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err
    except (RuntimeError, ValueError) as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
