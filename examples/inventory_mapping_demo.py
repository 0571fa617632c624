"""Show how objmap projects inventory objects into flat mappings."""

import argparse
import logging
import pathlib
import sys


def _ensure_src_path(src_path: str) -> None:
    """Ensure ``src`` is importable in the current interpreter.

    :param src_path: Absolute path to the repository ``src`` directory.
    """
    exists: bool = src_path in sys.path
    if exists is False:
        sys.path.insert(0, src_path)


def _format_mapping(title: str, mapping: dict[str, object]) -> str:
    """Render one mapping as indented ``name = value`` lines.

    :param title: Heading line.
    :param mapping: Mapping to render.
    :returns: Rendered text.
    """
    lines: list[str] = [title]
    if len(mapping) == 0:
        lines.append("    (no members)")
    for name, value in mapping.items():
        lines.append(f"    {name} = {value!r}")
    return "\n".join(lines)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments.

    :returns: Parsed arguments.
    """
    parser = argparse.ArgumentParser(description="Map demo inventory objects with objmap.")
    parser.add_argument("--sku", type=str, default="milk-1l", help="SKU of the demo item.")
    parser.add_argument("--quantity", type=int, default=3, help="Units on hand for the demo item.")
    parser.add_argument("--expired", action="store_true", help="Mark the perishable batch as expired.")
    parser.add_argument("--verbose", action="store_true", help="Show objmap cache population logs.")
    return parser.parse_args()


def main() -> int:
    """Run the demo.

    :returns: Process exit code.
    """
    args: argparse.Namespace = _parse_args()
    src_path: str = str(pathlib.Path(__file__).resolve().parent.parent / "src")
    _ensure_src_path(src_path)

    if args.verbose is True:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    from objmap import map_of
    from objmap.demo import Dimensions
    from objmap.demo import Item
    from objmap.demo import PerishableItem
    from objmap.demo import Shipment

    perishable = PerishableItem(args.sku, args.quantity, "2026-11-01", expired=args.expired)
    shipment = Shipment("ship-0001", perishable, Dimensions(20.0, 10.0, 8.0))

    print(_format_mapping("Perishable item declared as Item:", map_of(perishable, Item)))
    print(_format_mapping("Shipment:", map_of(shipment)))
    print(_format_mapping("Shipment dimensions:", map_of(shipment.dimensions)))
    print(_format_mapping("Stock status enum:", map_of(perishable.status)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
