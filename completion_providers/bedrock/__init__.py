"""AWS Bedrock Converse adapter."""

from .client import BedrockAdapter

__all__ = ["BedrockAdapter"]
