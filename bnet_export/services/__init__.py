"""Export pipeline stages."""

from .token_exchanger import TokenExchanger
from .secret_retriever import SecretRetriever
from .provisioning import ProvisioningEncoder, build_provisioning_uri, decode_secret, encode_secret
from .pipeline import describe_error, export_authenticator

__all__ = [
    "TokenExchanger",
    "SecretRetriever",
    "ProvisioningEncoder",
    "build_provisioning_uri",
    "decode_secret",
    "encode_secret",
    "describe_error",
    "export_authenticator",
]
