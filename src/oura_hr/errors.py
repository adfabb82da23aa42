"""Exceptions raised by oura_hr.

Library code raises these; only the CLI decides whether a failure is
reported (setup) or swallowed into a silent exit (fetch).
"""


class OuraHRError(Exception):
    """Base class for all oura_hr failures."""


class ConfigError(OuraHRError):
    """Required configuration is missing."""


class TokenStoreError(OuraHRError):
    """Token file is missing, unreadable or malformed."""


class TokenExchangeError(OuraHRError):
    """Token endpoint did not return a usable access token."""


class FetchError(OuraHRError):
    """Heart-rate request failed or returned an undecodable body."""


class SetupError(OuraHRError):
    """Interactive authorization did not produce a code."""
