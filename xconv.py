#!/usr/bin/env python3
"""
XConverter - Command Line Version
Convert XMODEL_EXPORT models and XANIM_EXPORT animations to USD
"""

import argparse
import sys

from xexport_converter import XExportConverter
from readers import SUPPORTED_EXTENSIONS, is_supported_format


def build_parser():
    parser = argparse.ArgumentParser(
        prog='XConverter',
        description='Convert XMODEL_EXPORT / XANIM_EXPORT files to USD',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert models next to their source files
  python xconv.py body.xmodel_export head.xmodel_export

  # Convert animations using a model's skeleton, into one folder
  python xconv.py walk.xanim_export run.xanim_export --skeleton body.xmodel_export --output-dir ./out

  # Write text USD for inspection
  python xconv.py body.xmodel_export --format usda

Supported input formats:
  .xmodel_export  - model (skeleton, meshes, materials)
  .xanim_export   - animation (requires --skeleton)
        """
    )

    parser.add_argument('inputs', nargs='+', help='Files to convert')
    parser.add_argument('--output-dir', type=str,
                        help='Output directory (default: beside each input file)')
    parser.add_argument('--skeleton', type=str,
                        help='Model file supplying the skeleton for animations')
    parser.add_argument('--format', choices=['usd', 'usda'], default='usd',
                        help='USD binary crate (usd) or text layer (usda) (default: usd)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    inputs = [path for path in args.inputs if is_supported_format(path)]
    if not inputs:
        print("Error: No valid files provided.", file=sys.stderr)
        print(f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}", file=sys.stderr)
        return 1

    converter = XExportConverter(ascii=args.format == 'usda')

    try:
        results = converter.convert_batch(inputs, args.output_dir, args.skeleton)
    except ImportError as e:
        print(f"\n✗ {e}", file=sys.stderr)
        return 1

    if not results['success']:
        print(f"\n✗ {results['message']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
