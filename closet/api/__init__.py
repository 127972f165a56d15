"""HTTP clients for external detection and generation providers."""

from .clarifai_client import ClarifaiClient
from .errors import ProviderRequestError
from .openai_client import OpenAIClient

__all__ = ["ClarifaiClient", "OpenAIClient", "ProviderRequestError"]
