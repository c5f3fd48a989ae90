from typing import Any, Dict


def login_url(config: Dict[str, Any]) -> str:
    return config['base_url'].rstrip('/') + config['login_path']


def is_login_url(config: Dict[str, Any], url: str) -> bool:
    """True while the browser is still on the login path (hash routes included)."""
    return config['login_path'].rstrip('/') in url
