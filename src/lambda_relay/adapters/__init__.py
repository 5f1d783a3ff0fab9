"""Collaborator implementations.

``lambda_relay.adapters.aws`` needs boto3; ``lambda_relay.adapters.memory``
has no third-party dependencies. Import the one you need directly.
"""
