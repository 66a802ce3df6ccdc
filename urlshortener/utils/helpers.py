"""Helper utilities shared by the service layer.

Functions:
    get_short_url(base_url: str, short_url_id: int) -> str
        Get string representation of short URL for a given id
"""


def get_short_url(base_url: str, short_url_id: int) -> str:
    """Get string representation of shortened URL

    Args:
        base_url (str): public base URL of the service, with or without a trailing slash
        short_url_id (int): id of the short URL record

    Returns:
        str: short url string representation

    Example:
        >>> get_short_url('http://localhost:8080/', 42)
        'http://localhost:8080/42'
    """
    return f'{base_url.rstrip("/")}/{short_url_id}'
