#!/usr/bin/env python3
"""
CDK entrypoint for the Serverless Image Handler template.

Run:
    VERSION=v5.0.0 BUCKET_NAME=my-dist-bucket cdk synth
"""

import sys

from aws_cdk import App
from aws_lambda_powertools import Logger

from core.models.context import BuildContext
from core.models.errors import TemplateBuildError
from stacks.constructs_stack import create_stack

logger = Logger(service="serverless-image-handler-synth", UTC=True)


def main() -> None:
    try:
        build_context = BuildContext.from_env()
        app = App()
        create_stack(app, build_context)
        app.synth()
    except TemplateBuildError as exc:
        logger.exception(
            "Template synthesis failed",
            extra={"error_code": exc.error_code, "details": exc.details},
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
