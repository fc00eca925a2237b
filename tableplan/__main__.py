import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from tableplan import (
    LayoutEditor,
    LayoutError,
    load_layout_file,
    write_layout_file,
)
from tableplan.boundary import PolygonBoundary, RectBoundary

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _describe_boundary(editor: LayoutEditor) -> str:
    constraint = editor.boundary.constraint
    if isinstance(constraint, RectBoundary):
        r = constraint.rect
        return f"rect x={r.x:g} y={r.y:g} width={r.width:g} height={r.height:g}"
    if isinstance(constraint, PolygonBoundary):
        suffix = " (degenerate, unconstrained)" if constraint.is_degenerate else ""
        return f"polygon with {len(constraint.points)} points{suffix}"
    return "none"


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect or enforce a floor-plan layout")
    parser.add_argument("path", help="Path to the layout JSON file")
    parser.add_argument(
        "--enforce",
        action="store_true",
        help="Run every entity through the commit pipeline (clamp or revert)",
    )
    parser.add_argument(
        "--output",
        help="Where to write the enforced layout (default: overwrite PATH)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        store, constraint = load_layout_file(args.path)
    except (OSError, LayoutError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    editor = LayoutEditor(store, constraint)
    print(f"Tables: {len(store.tables)}")
    print(f"Objects: {len(store.objects)}")
    print(f"Boundary: {_describe_boundary(editor)}")

    if args.enforce:
        results = editor.enforce_boundary()
        changed = [r for r in results if r.outcome != "committed"]
        print(f"Enforced: {len(results)} entities, {len(changed)} adjusted")
        for result in changed:
            print(f"  {result.entity_id}: {result.outcome} -> ({result.x:g}, {result.y:g})")
        output_path = Path(args.output or args.path)
        logger.info("Writing layout to %s", output_path)
        write_layout_file(output_path, store, editor.boundary.constraint)
        print(f"Layout written to {output_path}")

    violations = list(editor.pipeline.violations())
    print("Violations:")
    if not violations:
        print("  (none)")
    for entity in violations:
        print(f"  - {entity.kind} {entity.id} at ({entity.x:g}, {entity.y:g}) size {entity.width:g}x{entity.height:g}")
    return 1 if violations else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
