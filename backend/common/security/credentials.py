"""
Credential comparison utilities.

Stored credentials are opaque strings compared for exact equality. The comparison
runs in constant time with respect to the content of the strings so response
timing does not reveal how much of a password matched.
"""

import hmac


def credentials_match(supplied: str | None, stored: str | None) -> bool:
    """
    Compare a supplied credential against a stored one.

    Args:
        supplied: Value provided by the caller (username or password).
        stored: Value held by the credential store or a tenant bundle.

    Returns:
        True only if both values are present and exactly equal (case-sensitive).

    Example:
        ```python
        credentials_match("s3cret", "s3cret")  # True
        credentials_match("S3cret", "s3cret")  # False
        credentials_match("", None)            # False
        ```
    """
    if supplied is None or stored is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))
