"""
Property Visualiser - command line entry point.
Places a tiny home or pool into a property photo and writes the result.

Usage:
    python main.py photo.jpg --product deluxe-tiny-home --hour 18 --out result.png
"""

# Load environment variables from .env file FIRST
from dotenv import load_dotenv
load_dotenv()

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from editing import EditingSession
from generation import GenerationOptions, ImageGenerationService, PlacementRequest
from utils.products import POOL_MODELS, TINY_HOME_MODELS


def build_parser() -> argparse.ArgumentParser:
    product_ids = [p.id for p in [*TINY_HOME_MODELS, *POOL_MODELS]]

    parser = argparse.ArgumentParser(description="Place a product into a property photo")
    parser.add_argument("photo", type=Path, help="Property photo to edit")
    parser.add_argument("--product", required=True, choices=product_ids, help="Product to place")
    parser.add_argument("--hour", type=int, default=None, help="Time of day for lighting (7-22)")
    parser.add_argument("--placement", choices=["center", "left", "right"], default=None)
    parser.add_argument("--style", default=None, help="Visual style, e.g. Realistic or Cinematic")
    parser.add_argument("--person-height", type=float, default=None, help="Height in cm of a person in the photo")
    parser.add_argument("--accuracy", choices=["standard", "maximum", "ultra"], default="standard")
    parser.add_argument("--provider", choices=["gemini", "flux"], default=None)
    parser.add_argument("--logo", type=Path, default=None, help="Logo for the watermark")
    parser.add_argument("--no-watermark", action="store_true")
    parser.add_argument("--out", type=Path, default=Path("result.png"))
    return parser


async def run(args: argparse.Namespace) -> int:
    try:
        request = PlacementRequest(
            product_id=args.product,
            hour=args.hour,
            placement=args.placement,
            style=args.style,
            person_height_cm=args.person_height,
        )
        options = GenerationOptions(accuracy_mode=args.accuracy)
    except ValidationError as e:
        print(f"[ERR] Invalid arguments: {e}")
        return 2

    if not args.photo.exists():
        print(f"[ERR] Photo not found: {args.photo}")
        return 2

    try:
        generator = ImageGenerationService(provider=args.provider)
    except ValueError as e:
        print(f"[ERR] {e}")
        return 2

    session = EditingSession.from_request(generator, request, options=options)
    session.load_image(args.photo.read_bytes())

    try:
        result = await session.generate_placement(request.placement)
    except FileNotFoundError as e:
        print(f"[ERR] Product reference image missing: {e}")
        return 1

    if result is None or not result.success:
        print(f"[ERR] Placement failed: {session.last_error}")
        return 1

    logo = args.logo.read_bytes() if args.logo else None
    output = session.export_image(watermark=not args.no_watermark, logo_bytes=logo)
    args.out.write_bytes(output)
    print(f"[OK] Saved {args.out} ({result.provider}, {result.elapsed_seconds:.1f}s)")
    return 0


def main() -> None:
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
