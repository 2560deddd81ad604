import argparse
import logging
import os
from pprint import pprint
from typing import Optional

from psd_layers import PSDImage
from psd_layers.diagnostics import CollectingSink, LoggingSink
from psd_layers.errors import PSDDecodeError
from psd_layers.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="psd-layers command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export layers as PNG")
    export_parser.add_argument(
        "input_file",
        help="Input PSD file (optionally with layer index, e.g. file.psd[0])",
    )
    export_parser.add_argument(
        "output",
        help="Output directory, or output image file when a layer index is given",
    )
    export_parser.add_argument(
        "--prefix", default="layer", help="File name prefix of exported layers"
    )
    export_parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Skip layers that fail to decode instead of stopping",
    )

    show_parser = subparsers.add_parser("show", help="Show the file content")
    show_parser.add_argument("input_file", help="Input PSD file")

    debug_parser = subparsers.add_parser(
        "debug", help="Show the decoding events for PSD file"
    )
    debug_parser.add_argument("input_file", help="Input PSD file")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    if args.verbose:
        logging.getLogger("psd_layers").setLevel(logging.DEBUG)
    else:
        logging.getLogger("psd_layers").setLevel(logging.INFO)

    try:
        if args.command == "export":
            return _export(args)

        elif args.command == "show":
            psd = PSDImage.open(args.input_file)
            print(psd)
            for index, record in enumerate(psd.layer_records):
                print(
                    "  [%d] bbox=%r channels=%r blend_mode=%s opacity=%d"
                    % (
                        index,
                        record.bbox,
                        [int(c.id) for c in record.channel_info],
                        record.blend_mode,
                        record.opacity,
                    )
                )

        elif args.command == "debug":
            sink = CollectingSink(forward=LoggingSink())
            psd = PSDImage.open(args.input_file, sink=sink)
            for _ in psd.decode_layers(skip_errors=True):
                pass
            for event in sink:
                print(event)
            record = psd._record
            pprint(record.header)
            pprint(record.color_mode_data)
            pprint(record.image_resources)
            layer_and_mask = record.layer_and_mask_information
            if record.layer_info is not None:
                pprint(record.layer_info)
            pprint(layer_and_mask.global_layer_mask_info)
            pprint(layer_and_mask.tagged_blocks)

    except (OSError, PSDDecodeError) as e:
        logger.error(str(e))
        return 1

    return None


def _export(args: argparse.Namespace) -> Optional[int]:
    input_parts = args.input_file.split("[")
    input_file = input_parts[0]
    index = None
    if len(input_parts) > 1:
        try:
            index = int(input_parts[1].rstrip("]"))
        except ValueError:
            logger.error("Invalid layer index: %r" % input_parts[1].rstrip("]"))
            return 1
    psd = PSDImage.open(input_file)

    if index is not None:
        try:
            layer = psd.decode_layer(index)
        except IndexError:
            logger.error("No layer %d in %s" % (index, input_file))
            return 1
        image = layer.topil()
        if image:
            image.save(args.output)
        else:
            logger.warning("Layer %d is empty, nothing written" % index)
        return None

    os.makedirs(args.output, exist_ok=True)
    for layer in psd.decode_layers(skip_errors=args.skip_errors):
        image = layer.topil()
        if image is None:
            logger.info("Layer %d is empty, skipped" % layer.index)
            continue
        path = os.path.join(args.output, "%s%d.png" % (args.prefix, layer.index))
        image.save(path)
        logger.debug("wrote %s" % path)
    return None


if __name__ == "__main__":
    main()
