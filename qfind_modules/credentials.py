"""
Credentials handling for qfind.

Bearer tokens are read from the same credentials store that the qq CLI
writes on login, or taken from the QFIND_BEARER_TOKEN environment variable.
"""

import os
from typing import Optional

# Try to use ujson for faster parsing
try:
    import ujson as json_parser
except ImportError:
    import json as json_parser

CREDENTIALS_FILENAME = '.qfsd_cred'
TOKEN_ENV_VAR = 'QFIND_BEARER_TOKEN'


def credential_store_filename(creds_file_name: str = CREDENTIALS_FILENAME) -> str:
    """Get the path to the credentials store file."""
    if os.path.isabs(creds_file_name):
        return creds_file_name

    home = os.path.expanduser('~')
    if home == '~':
        home = os.environ.get('HOME')

    if home is None or home == '~':
        raise OSError('Could not find home directory for credentials store')

    path = os.path.join(home, creds_file_name)
    if os.path.isdir(path):
        raise OSError('Credentials store is a directory: %s' % path)
    return path


def get_credentials(path: str) -> Optional[str]:
    """
    Load credentials from file and return bearer token.
    Returns None if file doesn't exist, is empty or holds no token.
    """
    if not os.path.isfile(path):
        return None

    try:
        with open(path) as store:
            if os.fstat(store.fileno()).st_size == 0:
                return None
            contents = json_parser.load(store)
    except (ValueError, OSError):
        return None

    if not isinstance(contents, dict):
        return None

    bearer_token = contents.get('bearer_token')
    if not isinstance(bearer_token, str) or not bearer_token:
        return None

    return bearer_token


def resolve_bearer_token(credentials_store: Optional[str] = None) -> Optional[str]:
    """Return the bearer token from the environment, else from the credentials store."""
    token = os.environ.get(TOKEN_ENV_VAR)
    if token:
        return token

    if credentials_store:
        return get_credentials(credentials_store)
    return get_credentials(credential_store_filename())
