#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(REPO_ROOT / "src"))

from discoclient.codegen import generate_module, module_name, write_module  # noqa: E402
from discoclient.discovery import load_document  # noqa: E402


def _documents(discovery_dir: Path) -> list[Path]:
    return sorted(
        path for path in discovery_dir.iterdir() if path.suffix.lower() in {".json", ".yaml", ".yml"}
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Regenerate client modules from discovery documents.")
    parser.add_argument("--discovery-dir", default=str(REPO_ROOT / "discovery"))
    parser.add_argument("--out-dir", default=str(REPO_ROOT / "src" / "discoclient" / "apis"))
    parser.add_argument("--check", action="store_true", help="Fail if checked-in modules are out of date")
    args = parser.parse_args(argv)

    discovery_dir = Path(args.discovery_dir)
    out_dir = Path(args.out_dir)
    if not discovery_dir.is_dir():
        raise FileNotFoundError(f"Missing discovery directory: {discovery_dir}")

    stale: list[Path] = []
    for doc_path in _documents(discovery_dir):
        document = load_document(doc_path)
        if args.check:
            target = out_dir / f"{module_name(document)}.py"
            source = generate_module(document)
            current = target.read_text(encoding="utf-8") if target.exists() else None
            if current != source:
                stale.append(target)
            continue

        target = write_module(document, out_dir)
        print(f"[codegen] {doc_path.name} -> {target}")

    if stale:
        for path in stale:
            print(f"[codegen] out of date: {path}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
