#!/usr/bin/env python3
"""
Preview which outputs a synthesized template exposes for given parameters.

Run:
    cdk synth
    python scripts/preview_template.py \
      --template cdk.out/ServerlessImageHandlerStack.template.json \
      --param SourceBuckets=my-bucket \
      --param CorsEnabled=Yes
"""

import argparse
import json
from pathlib import Path
import sys
from typing import Any, cast

from aws_lambda_powertools import Logger

from core.models.errors import TemplateBuildError
from core.preview.template_preview import preview_template

logger = Logger(service="template-preview")

DEFAULT_TEMPLATE = "cdk.out/ServerlessImageHandlerStack.template.json"


def parse_param(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected Name=Value, got '{raw}'")
    return name.strip(), value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview Serverless Image Handler template outputs")

    parser.add_argument(
        "--template",
        default=DEFAULT_TEMPLATE,
        help="Path to the synthesized template JSON",
    )
    parser.add_argument(
        "--param",
        action="append",
        type=parse_param,
        default=[],
        help="Parameter override as Name=Value (repeatable)",
    )
    parser.add_argument(
        "--region",
        default=None,
        help="Value used for AWS::Region",
    )

    return parser.parse_args(argv)


def load_template(path: str) -> dict[str, Any]:
    with open(Path(path), encoding="utf-8") as f:
        return cast(dict[str, Any], json.load(f))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        template = load_template(args.template)
        preview = preview_template(
            template,
            dict(args.param),
            pseudo_parameters={"AWS::Region": args.region} if args.region else None,
        )
    except (OSError, json.JSONDecodeError):
        logger.exception("Unable to read template", extra={"path": args.template})
        return 1
    except TemplateBuildError as exc:
        logger.error(
            "Template preview failed",
            extra={
                "error_code": exc.error_code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return 1

    logger.info(
        "Template preview",
        extra={
            "parameters": preview.parameters,
            "conditions": preview.conditions,
            "active_outputs": preview.active_outputs(),
            "inactive_outputs": sorted(k for k, o in preview.outputs.items() if not o.active),
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
