"""
Command-line interface for the product opportunity scorer.

Usage:
    python -m prodscore make-example [--output example_opportunity.json]
    python -m prodscore score --input opportunity.json [--output result.json] [--readable]
    python -m prodscore product --input product.json [--output result.json]
    python -m prodscore serve [--port 8000]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from prodscore import __version__
from prodscore.cli.readable_output import render_score_summary
from prodscore.models.inputs import (
    Criterion,
    CriterionId,
    Margins,
    Opportunity,
    ProductScoreRequest,
)
from prodscore.models.outputs import ScoreResult
from prodscore.scoring.engine import evaluate_opportunity
from prodscore.scoring.product_metrics import evaluate_product

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="prodscore",
        description="Product Opportunity Scorer - weighted multi-criteria scoring "
                    "and go/no-go gates for product research.",
    )
    parser.add_argument("--version", action="version", version=f"prodscore {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # make-example command
    example_parser = subparsers.add_parser(
        "make-example",
        help="Generate an example opportunity JSON file",
    )
    example_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("example_opportunity.json"),
        help="Output path for example file (default: example_opportunity.json)",
    )

    # score command
    score_parser = subparsers.add_parser(
        "score",
        help="Score an opportunity from its criteria",
    )
    score_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON file with name, criteria and margins",
    )
    score_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Path to save JSON output (prints to stdout if not specified)",
    )
    score_parser.add_argument(
        "--readable",
        action="store_true",
        help="Print a readable summary instead of JSON",
    )

    # product command
    product_parser = subparsers.add_parser(
        "product",
        help="Score a product from catalog export fields",
    )
    product_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON file with product fields, thresholds and margins",
    )
    product_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Path to save JSON output (prints to stdout if not specified)",
    )
    product_parser.add_argument(
        "--readable",
        action="store_true",
        help="Print a readable summary instead of JSON",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the FastAPI web server",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    return parser


def example_opportunity() -> Opportunity:
    """Example opportunity used by make-example and the API."""
    return Opportunity(
        name="Silicone Baking Mat",
        criteria=[
            Criterion(id=CriterionId.REVENUE, name="Revenue Potential",
                      value=8000, max_value=10000, weight=30),
            Criterion(id=CriterionId.DEMAND, name="Market Demand",
                      value=1500, max_value=2000, weight=25),
            Criterion(id=CriterionId.COMPETITION, name="Competition Level",
                      value=30, max_value=100, weight=20),
            Criterion(id=CriterionId.BARRIERS, name="Barriers to Entry",
                      value=20, max_value=100, weight=25),
        ],
        margins=Margins(computed_margin=32.5),
    )


def _emit_result(result: ScoreResult, args: argparse.Namespace) -> None:
    """Write JSON to file/stdout, or a readable summary."""
    output_json = result.model_dump_json(indent=2)

    if args.output:
        with open(args.output, "w") as f:
            f.write(output_json)
        print(f"\nResults saved to {args.output}", file=sys.stderr)
    elif args.readable:
        for line in render_score_summary(json.loads(output_json)):
            print(line)
    else:
        print(output_json)

    print(
        f"\nSummary: score {result.score}, {result.gates_passed}/4 gates, "
        f"recommendation {result.recommendation.value}",
        file=sys.stderr,
    )
    if result.warnings:
        print("\nWarnings:", file=sys.stderr)
        for w in result.warnings:
            print(f"  - {w}", file=sys.stderr)


def cmd_make_example(args: argparse.Namespace) -> int:
    """Generate an example opportunity JSON file."""
    output_json = example_opportunity().model_dump_json(indent=2, by_alias=True)

    with open(args.output, "w") as f:
        f.write(output_json)

    print(f"Created example opportunity file: {args.output}")
    print("\nScore it with:")
    print(f"  python -m prodscore score --input {args.output}")

    return 0


def cmd_score(args: argparse.Namespace) -> int:
    """Score an opportunity from a criteria JSON file."""
    try:
        with open(args.input) as f:
            input_data = json.load(f)

        opportunity = Opportunity(**input_data)
        logger.info("Scoring %s (%d criteria)", opportunity.name, len(opportunity.criteria))

        result = evaluate_opportunity(
            opportunity.criteria,
            opportunity.margins,
            name=opportunity.name,
        )
        _emit_result(result, args)
        return 0

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_product(args: argparse.Namespace) -> int:
    """Score a product from catalog export fields."""
    try:
        with open(args.input) as f:
            input_data = json.load(f)

        request = ProductScoreRequest(**input_data)
        logger.info("Scoring product %s", request.product.title or "(untitled)")

        result = evaluate_product(request)
        _emit_result(result, args)
        return 0

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI web server."""
    try:
        import uvicorn

        print(f"\nStarting Product Opportunity Scorer API", file=sys.stderr)
        print(f"API: http://{args.host}:{args.port}/", file=sys.stderr)
        print(f"Docs: http://{args.host}:{args.port}/docs", file=sys.stderr)
        print("\nPress Ctrl+C to stop\n", file=sys.stderr)

        uvicorn.run(
            "prodscore.api.server:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0

    except ImportError as e:
        print(f"Error: Missing dependency: {e}", file=sys.stderr)
        print("Install with: pip install uvicorn fastapi", file=sys.stderr)
        return 1


def cli(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "make-example": cmd_make_example,
        "score": cmd_score,
        "product": cmd_product,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


def main():
    """Console script entrypoint wrapper."""
    return cli()


if __name__ == "__main__":
    sys.exit(cli())
