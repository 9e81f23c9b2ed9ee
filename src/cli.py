"""Command-line interface for declmeta."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from artifacts import generate_all_artifacts
from contract.validation import validate_artifacts
from logconfig import configure_logging
from metadata.errors import MetadataError
from parse.treesitter_declarations import extract_module
from render.dumper import render
from settings.config import ConfigError, DeclMetaConfig, load_config
from verify.verify import verify_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="declmeta")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Minimum log level (default: config, else WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log events as JSON lines on stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract", help="Extract declaration metadata artifacts"
    )
    _add_common_paths(extract_parser)
    extract_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for generated artifacts (default: config output dir)",
    )

    render_parser = subparsers.add_parser(
        "render", help="Print the canonical signatures of source files"
    )
    render_parser.add_argument("files", nargs="+", help="Source files to render")

    validate_parser = subparsers.add_parser("validate", help="Validate artifacts")
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify artifacts match a fresh extraction"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    return parser


def _configure_logging(args: argparse.Namespace, config: DeclMetaConfig | None) -> None:
    if config is not None and args.log_level is None and not args.log_json:
        configure_logging(config=config.logging)
        return
    configure_logging(level=args.log_level or "WARNING", json_format=args.log_json)


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _resolve_artifacts_dir(
    root: Path, config: DeclMetaConfig, artifacts_dir: str | None
) -> Path:
    if artifacts_dir is None:
        return (root / config.output_dir).resolve()
    return Path(artifacts_dir).expanduser().resolve()


def _handle_extract(root: Path, config: DeclMetaConfig, out_dir: str | None) -> int:
    summary = generate_all_artifacts(
        root=root, out_dir=_resolve_output_dir(out_dir), config=config
    )
    sys.stderr.write(
        f"extracted {summary['declaration_count']} declarations "
        f"from {summary['module_count']} modules\n"
    )
    return 0


def _handle_render(files: list[str]) -> int:
    for index, file_name in enumerate(files):
        path = Path(file_name)
        module = extract_module(path.as_posix(), path.read_bytes())
        if index:
            sys.stdout.write("\n")
        rendered = render(module)
        if rendered:
            sys.stdout.write(f"{rendered}\n")
    return 0


def _handle_validate(
    root: Path, config: DeclMetaConfig, artifacts_dir: str | None
) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, config, artifacts_dir)
    result = validate_artifacts(resolved_artifacts_dir)
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_verify(
    root: Path, config: DeclMetaConfig, artifacts_dir: str | None
) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, config, artifacts_dir)
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        for line in result.signature_diff:
            sys.stderr.write(f"{line}\n")
        return 1
    return 0


def _run(args: argparse.Namespace) -> int:
    if args.command == "render":
        _configure_logging(args, None)
        return _handle_render(args.files)

    root = Path(args.root).expanduser().resolve()
    _configure_logging(args, None)
    config = load_config(root)
    _configure_logging(args, config)

    if args.command == "extract":
        return _handle_extract(root, config, args.out_dir)

    if args.command == "validate":
        return _handle_validate(root, config, args.artifacts_dir)

    if args.command == "verify":
        return _handle_verify(root, config, args.artifacts_dir)

    raise AssertionError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        return _run(args)
    except (ConfigError, MetadataError, OSError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
