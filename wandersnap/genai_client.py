from functools import lru_cache

import google.genai as genai
from google.auth import exceptions as auth_errors
from google.genai import types

from .config import GCP_LOCATION, GENAI_TIMEOUT, GOOGLE_API_KEY, PROJECT_ID

# Raised while building the client or resolving credentials for a request:
# missing project/key, no application default credentials, failed token refresh.
CLIENT_SETUP_ERRORS = (ValueError, auth_errors.GoogleAuthError)


@lru_cache(maxsize=1)
def get_client() -> genai.Client:
    http_options = types.HttpOptions(timeout=int(GENAI_TIMEOUT * 1000))
    if GOOGLE_API_KEY:
        return genai.Client(api_key=GOOGLE_API_KEY, http_options=http_options)
    # No API key: go through Vertex AI with application default credentials
    return genai.Client(
        vertexai=True,
        project=PROJECT_ID,
        location=GCP_LOCATION,
        http_options=http_options,
    )
