"""Serverless Image Handler deployment template package."""

__version__ = "5.0.0"
__author__ = "Bharat kumar"
__description__ = (
    "CloudFormation template for the Serverless Image Handler built with AWS CDK"
)

__all__ = ["core", "handlers", "stacks"]
